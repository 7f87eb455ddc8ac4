"""Configuration loaded from a JSON file, token may come from the environment."""

import json
import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

from anonmail.core.errors import ConfigError

load_dotenv()

DEFAULT_CONFIG_PATH = os.getenv("ANONMAIL_CONFIG", "./cfg.json")
DEFAULT_REDIS_DATABASE_ADDRESS = "localhost:6379"
DEFAULT_START_MESSAGE = "Hello, send me anything and I'll forward it to my owner"


@dataclass
class Config:
    token: str
    forward_chat_id: int
    admin_list: List[int] = field(default_factory=list)
    redis_database_address: str = DEFAULT_REDIS_DATABASE_ADDRESS
    redis_database_id: int = 0
    start_message: str = DEFAULT_START_MESSAGE
    record_ttl: int = 0

    def __post_init__(self):
        # Errors are always reported into the forward chat too.
        if self.forward_chat_id not in self.admin_list:
            self.admin_list.append(self.forward_chat_id)

    @classmethod
    def from_dict(cls, data):
        token = data.get("token") or os.getenv("TELEGRAM_BOT_TOKEN", "")
        if not token:
            raise ConfigError("token is missing (set it in the config or TELEGRAM_BOT_TOKEN in .env)")
        if "forward-chat-id" not in data:
            raise ConfigError("forward-chat-id is missing")
        try:
            return cls(
                token=token,
                forward_chat_id=int(data["forward-chat-id"]),
                admin_list=[int(uid) for uid in data.get("admin-list") or []],
                redis_database_address=data.get("redis-database-address") or DEFAULT_REDIS_DATABASE_ADDRESS,
                redis_database_id=int(data.get("redis-database-id") or 0),
                start_message=data.get("start-message") or DEFAULT_START_MESSAGE,
                record_ttl=int(data.get("record-ttl") or 0),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid config value: {e}") from e


def load_config(path=DEFAULT_CONFIG_PATH):
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"config {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config {path} must be a JSON object")
    return Config.from_dict(data)
