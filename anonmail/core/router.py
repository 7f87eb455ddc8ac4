"""Routes every inbound message in one of two directions.

Personal chat -> forward chat, where operators see a header naming the sender
followed by the forwarded message. Operator reply in the forward chat -> back
to the original sender. `/ban` and `/unban` sent as a reply in the forward chat
toggle the sender's access instead of relaying anything.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from telegram import Message, ReplyParameters
from telegram.constants import ParseMode
from telegram.error import TelegramError

from anonmail.core.errors import DeliveryError
from anonmail.core.markdown import identity_header
from anonmail.memory.access import AccessGate
from anonmail.memory.ledger import CorrespondenceRecord, Ledger, ReplyMode

BANNED_NOTICE = "you are banned :S"
BAN_COMMANDS = ("/ban", "/unban")


class EventKind(Enum):
    PERSONAL_MESSAGE = "personal_message"
    FORWARD_CHAT_BAN_REPLY = "forward_chat_ban_reply"
    FORWARD_CHAT_RELAY_REPLY = "forward_chat_relay_reply"
    OTHER = "other"


@dataclass(frozen=True)
class Event:
    kind: EventKind
    message: Message
    command: Optional[str] = None


def parse_ban_command(text, bot_username=None):
    """Return "/ban" or "/unban" if the text is one of them, else None."""
    if not text:
        return None
    head = text.split(maxsplit=1)[0] if text.strip() else ""
    command, _, target = head.partition("@")
    if command not in BAN_COMMANDS:
        return None
    if target and bot_username and target.lower() != bot_username.lower():
        return None
    return command


def classify(message: Message, forward_chat_id: int, bot_username=None) -> Event:
    sender = message.from_user
    if sender is not None and message.chat.id == sender.id:
        return Event(EventKind.PERSONAL_MESSAGE, message)

    if message.chat.id == forward_chat_id and message.reply_to_message is not None:
        command = parse_ban_command(message.text, bot_username)
        if command:
            return Event(EventKind.FORWARD_CHAT_BAN_REPLY, message, command)
        return Event(EventKind.FORWARD_CHAT_RELAY_REPLY, message)

    return Event(EventKind.OTHER, message)


def reply_options(record: CorrespondenceRecord) -> dict:
    if record.reply_mode == ReplyMode.AS_REPLY:
        return {"reply_parameters": ReplyParameters(message_id=record.original_message_id)}
    return {}


async def _deliver(what, request):
    try:
        return await request
    except TelegramError as e:
        raise DeliveryError(f"cannot {what}: {e}") from e


def chat_name(chat):
    if chat.username:
        return f"@{chat.username}"
    if chat.title:
        return chat.title
    return f"{chat.first_name or ''} {chat.last_name or ''}"


class Router:
    def __init__(self, ledger: Ledger, gate: AccessGate, forward_chat_id: int,
                 admin_ids=(), notifier=None):
        self.ledger = ledger
        self.gate = gate
        self.forward_chat_id = forward_chat_id
        self.admin_ids = frozenset(admin_ids)
        self.notifier = notifier

    async def handle(self, message: Message, bot) -> Event:
        """Process one inbound message to completion. Errors propagate to the caller."""
        event = classify(message, self.forward_chat_id, getattr(bot, "username", None))

        if event.kind is EventKind.PERSONAL_MESSAGE:
            await self._relay_to_forward_chat(message, bot)
        elif event.kind is EventKind.FORWARD_CHAT_BAN_REPLY:
            await self._apply_ban_command(message, event.command, bot)
        elif event.kind is EventKind.FORWARD_CHAT_RELAY_REPLY:
            await self._relay_to_sender(message, bot)
        return event

    async def _relay_to_forward_chat(self, message, bot):
        sender = message.from_user
        if sender.id not in self.admin_ids and self.gate.is_banned(sender.id):
            print(f"  [gate] rejected message {message.message_id} from banned {sender.id}")
            await _deliver("send ban notice", bot.send_message(chat_id=message.chat.id, text=BANNED_NOTICE))
            return

        # Two independent writes: if the forward below fails, the header record stays.
        header = await _deliver("send sender header", bot.send_message(
            chat_id=self.forward_chat_id,
            text=identity_header(sender),
            parse_mode=ParseMode.MARKDOWN_V2,
        ))
        self.ledger.record(header.message_id, sender.id, ReplyMode.WITHOUT_REPLY)

        content = await _deliver("forward message", bot.forward_message(
            chat_id=self.forward_chat_id,
            from_chat_id=message.chat.id,
            message_id=message.message_id,
        ))
        self.ledger.record(content.message_id, sender.id, ReplyMode.AS_REPLY, message.message_id)
        print(f"  [relay] {sender.id}:{message.message_id} -> header {header.message_id}, copy {content.message_id}")

    async def _apply_ban_command(self, message, command, bot):
        record = self.ledger.lookup(message.reply_to_message.message_id)
        if command == "/ban":
            self.gate.ban(record.sender_id)
            answer = "banned"
        else:
            self.gate.unban(record.sender_id)
            answer = "unbanned"
        print(f"  [gate] {answer} {record.sender_id}")
        await _deliver(f"confirm {command}", bot.send_message(
            chat_id=message.chat.id,
            text=answer,
            reply_parameters=ReplyParameters(message_id=message.message_id),
        ))

    async def _relay_to_sender(self, message, bot):
        record = self.ledger.lookup(message.reply_to_message.message_id)
        copy = await _deliver(f"copy reply to {record.sender_id}", bot.copy_message(
            chat_id=record.sender_id,
            from_chat_id=message.chat.id,
            message_id=message.message_id,
            **reply_options(record),
        ))
        print(f"  [reply] {message.message_id} -> {record.sender_id}:{copy.message_id}")

    async def report_failure(self, error, chat=None):
        """Tell every operator that processing an update failed."""
        print(f"  [error] {error!r}")
        if self.notifier is None:
            return
        if chat is None:
            await self.notifier.alert(f"Error :c\n\n\t{error}")
            return
        await self.notifier.alert(f"Error :c\n\n\t{error}\n\nAt: '{chat_name(chat)}' [{chat.id}]")
