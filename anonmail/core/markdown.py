import re

_SPECIAL = re.compile(r"([_*\[\]()~`>#+\-=|{}.!])")


def escape_markdown_v2(text):
    """Backslash-escape every MarkdownV2 special character."""
    return _SPECIAL.sub(r"\\\1", text)


def identity_header(user):
    """Build the MarkdownV2 line that introduces a sender in the forward chat.

    `Ann Lee` links to t.me/<username> when the user has one, followed by the
    numeric id linking to the profile: `[Ann Lee](https://t.me/ann) \\([42](tg://openmessage?user_id=42)\\)`.
    """
    name = escape_markdown_v2(f"{user.first_name} {user.last_name or ''}")
    if user.username:
        name = f"[{name}](https://t.me/{user.username})"
    profile = f"[{escape_markdown_v2(str(user.id))}](tg://openmessage?user_id={user.id})"
    return f"{name} \\({profile}\\)"
