from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import ContextTypes


async def handle_start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Greet a new user with the configured start message."""
    await update.message.reply_text(context.bot_data["start_message"], parse_mode=ParseMode.MARKDOWN_V2)


async def handle_ok(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Liveness check."""
    await update.message.reply_text("ok")


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Hand every other message (text, media, /ban, /unban) to the router."""
    if update.message is None:
        return
    await context.bot_data["router"].handle(update.message, context.bot)


async def handle_error(update: object, context: ContextTypes.DEFAULT_TYPE):
    """Report a failed update to the operators, nothing is retried."""
    router = context.bot_data.get("router")
    chat = update.effective_chat if isinstance(update, Update) else None
    if router is None:
        print(f"  [error] {context.error!r}")
        return
    await router.report_failure(context.error, chat)
