from datetime import datetime, timezone
from types import SimpleNamespace

import fakeredis
import pytest
from telegram import Chat, Message, User

from anonmail.memory.access import AccessGate
from anonmail.memory.ledger import Ledger

FORWARD_CHAT_ID = -100500


class FakeBot:
    """Records every Bot API call and hands out increasing message ids."""

    username = "anonmail_bot"

    def __init__(self, fail_on=None, error=None):
        self.calls = []
        self.fail_on = fail_on
        self.error = error
        self._next_id = 1000

    async def _call(self, method, **kwargs):
        if method == self.fail_on:
            raise self.error
        self.calls.append((method, kwargs))
        self._next_id += 1
        return SimpleNamespace(message_id=self._next_id)

    async def send_message(self, **kwargs):
        return await self._call("send_message", **kwargs)

    async def forward_message(self, **kwargs):
        return await self._call("forward_message", **kwargs)

    async def copy_message(self, **kwargs):
        return await self._call("copy_message", **kwargs)

    def methods(self):
        return [method for method, _ in self.calls]


def make_user(user_id=42, first_name="Ann", last_name=None, username=None):
    return User(id=user_id, first_name=first_name, last_name=last_name, username=username, is_bot=False)


def personal_message(message_id=7, text="hi", user=None):
    user = user or make_user()
    return Message(
        message_id=message_id,
        date=datetime.now(timezone.utc),
        chat=Chat(id=user.id, type=Chat.PRIVATE, first_name=user.first_name,
                  last_name=user.last_name, username=user.username),
        from_user=user,
        text=text,
    )


def forward_chat_reply(reply_to_id, text="hello back", message_id=300, operator_id=9):
    chat = Chat(id=FORWARD_CHAT_ID, type=Chat.SUPERGROUP, title="operators")
    target = Message(message_id=reply_to_id, date=datetime.now(timezone.utc), chat=chat)
    return Message(
        message_id=message_id,
        date=datetime.now(timezone.utc),
        chat=chat,
        from_user=make_user(operator_id, "Op"),
        text=text,
        reply_to_message=target,
    )


@pytest.fixture
def db():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def broken_db():
    server = fakeredis.FakeServer()
    server.connected = False
    return fakeredis.FakeRedis(server=server, decode_responses=True)


@pytest.fixture
def ledger(db):
    return Ledger(db, FORWARD_CHAT_ID)


@pytest.fixture
def gate(db):
    gate = AccessGate(db, FORWARD_CHAT_ID)
    gate.seed()
    return gate


@pytest.fixture
def bot():
    return FakeBot()
