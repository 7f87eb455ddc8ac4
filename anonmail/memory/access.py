import redis

from anonmail.core.errors import StoreError
from anonmail.memory.database import banned_list_key

# Keeps the ban set key alive even when nobody has been banned yet.
SENTINEL_BANNED_ID = "777"


class AccessGate:
    """Ban set of one deployment. Never touches correspondence records."""

    def __init__(self, db: redis.Redis, forward_chat_id: int):
        self.db = db
        self.key = banned_list_key(forward_chat_id)

    def seed(self):
        self._call("seed ban list", self.db.sadd, self.key, SENTINEL_BANNED_ID)

    def ban(self, user_id: int):
        self._call(f"ban {user_id}", self.db.sadd, self.key, str(user_id))

    def unban(self, user_id: int):
        self._call(f"unban {user_id}", self.db.srem, self.key, str(user_id))

    def is_banned(self, user_id: int) -> bool:
        return bool(self._call(f"check {user_id}", self.db.sismember, self.key, str(user_id)))

    def _call(self, what, op, *args):
        try:
            return op(*args)
        except redis.RedisError as e:
            raise StoreError(f"cannot {what}: {e}") from e
