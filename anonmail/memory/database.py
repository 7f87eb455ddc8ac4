import redis

from anonmail.core.errors import ConfigError, StoreError

KEY_PREFIX = "anonmail"
DEFAULT_PORT = 6379


def record_key(forward_chat_id, forward_message_id):
    return f"{KEY_PREFIX}_{forward_chat_id}_{forward_message_id}"


def banned_list_key(forward_chat_id):
    return f"{KEY_PREFIX}_{forward_chat_id}_banned_list"


def parse_address(address):
    """Split `host:port` (either part may be omitted) into a tuple."""
    host, _, port = address.partition(":")
    try:
        return host or "localhost", int(port) if port else DEFAULT_PORT
    except ValueError as e:
        raise ConfigError(f"invalid redis-database-address {address!r}") from e


def init_db(address, db_id=0):
    """Connect to Redis at `host:port` and make sure it answers."""
    host, port = parse_address(address)
    db = redis.Redis(host=host, port=port, db=db_id, decode_responses=True)
    try:
        db.ping()
    except redis.RedisError as e:
        raise StoreError(f"cannot reach redis at {address}: {e}") from e
    return db
