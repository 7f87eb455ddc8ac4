"""Correspondence ledger.

Every message the bot places into the forward chat gets a record keyed by the
id Telegram assigned to that copy. The value is a plain string:

    "<sender id> 0"                  header, answer without reply
    "<sender id> 1 <original id>"    content copy, answer as a reply

Records are written once and only ever read back afterwards.
"""

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

import redis

from anonmail.core.errors import MalformedRecordError, NotFoundError, StoreError
from anonmail.memory.database import record_key

_INTEGER = re.compile(r"-?[0-9]+", re.ASCII)


class ReplyMode(IntEnum):
    WITHOUT_REPLY = 0
    AS_REPLY = 1


@dataclass(frozen=True)
class CorrespondenceRecord:
    sender_id: int
    reply_mode: ReplyMode
    original_message_id: Optional[int] = None

    def __post_init__(self):
        has_original = self.original_message_id is not None
        if has_original != (self.reply_mode == ReplyMode.AS_REPLY):
            raise ValueError("original_message_id is required for AS_REPLY and only for it")


def encode_record(record: CorrespondenceRecord) -> str:
    if record.reply_mode == ReplyMode.AS_REPLY:
        return f"{record.sender_id} {int(record.reply_mode)} {record.original_message_id}"
    return f"{record.sender_id} {int(record.reply_mode)}"


def decode_record(raw: str) -> CorrespondenceRecord:
    tokens = raw.split()
    if len(tokens) < 2 or not all(_INTEGER.fullmatch(t) for t in tokens):
        raise MalformedRecordError(raw)
    try:
        values = [int(t) for t in tokens]
        mode = ReplyMode(values[1])
    except ValueError as e:
        raise MalformedRecordError(raw) from e

    expected = 3 if mode == ReplyMode.AS_REPLY else 2
    if len(values) != expected:
        raise MalformedRecordError(raw)
    original = values[2] if mode == ReplyMode.AS_REPLY else None
    return CorrespondenceRecord(values[0], mode, original)


class Ledger:
    def __init__(self, db: redis.Redis, forward_chat_id: int, ttl: int = 0):
        self.db = db
        self.forward_chat_id = forward_chat_id
        self.ttl = ttl  # seconds, 0 keeps records forever

    def record(self, forward_message_id: int, sender_id: int, reply_mode: ReplyMode,
               original_message_id: Optional[int] = None) -> CorrespondenceRecord:
        entry = CorrespondenceRecord(sender_id, ReplyMode(reply_mode), original_message_id)
        key = record_key(self.forward_chat_id, forward_message_id)
        try:
            self.db.set(key, encode_record(entry), ex=self.ttl or None)
        except redis.RedisError as e:
            raise StoreError(f"cannot record message {forward_message_id}: {e}") from e
        return entry

    def lookup(self, forward_message_id: int) -> CorrespondenceRecord:
        try:
            raw = self.db.get(record_key(self.forward_chat_id, forward_message_id))
        except redis.RedisError as e:
            raise StoreError(f"cannot look up message {forward_message_id}: {e}") from e
        if raw is None:
            raise NotFoundError(forward_message_id)
        return decode_record(raw)
