from telegram import ChatMember
from telegram.error import TelegramError

from anonmail.core.errors import ChatPermissionError

MEDIA_RIGHTS = ("can_send_photos", "can_send_videos", "can_send_documents", "can_send_audios")


def _check_send_rights(rights, whose):
    if not rights.can_send_messages:
        raise ChatPermissionError(f"CanSendMessages is false ({whose})")
    missing = [right for right in MEDIA_RIGHTS if not getattr(rights, right, False)]
    if missing:
        raise ChatPermissionError(f"cannot send media: {', '.join(missing)} is false ({whose})")


async def check_forward_chat_rights(bot, forward_chat_id):
    """Refuse to start unless the bot can post into and read the forward chat."""
    try:
        member = await bot.get_chat_member(chat_id=forward_chat_id, user_id=bot.id)
        if member.status in (ChatMember.ADMINISTRATOR, ChatMember.OWNER):
            return member
        chat = await bot.get_chat(chat_id=forward_chat_id)
        me = await bot.get_me()
    except TelegramError as e:
        raise ChatPermissionError(f"cannot inspect forward chat {forward_chat_id}: {e}") from e

    if member.status in (ChatMember.LEFT, ChatMember.BANNED):
        raise ChatPermissionError(f"bot is not a member of forward chat {forward_chat_id}")

    if member.status == ChatMember.RESTRICTED:
        _check_send_rights(member, "bot restrictions")
    elif chat.permissions is not None:
        # Plain members get whatever the chat allows by default.
        _check_send_rights(chat.permissions, "chat default permissions")

    if not me.can_read_all_group_messages:
        raise ChatPermissionError("CanReadMessages is false, disable privacy mode for the bot")
    return member
