from telegram.error import TelegramError


class AdminNotifier:
    """Sends alerts to every operator (and to the forward chat)."""

    def __init__(self, bot, admin_ids):
        self.bot = bot
        self.admin_ids = list(admin_ids)

    async def alert(self, *comments):
        text = "\n\n".join(comments)
        for admin_id in self.admin_ids:
            try:
                await self.bot.send_message(chat_id=admin_id, text=text)
            except TelegramError as e:
                print(f"  [error] cannot alert {admin_id}: {e}")
