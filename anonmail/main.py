import argparse
import sys

from telegram import BotCommand
from telegram.error import TelegramError
from telegram.ext import Application, CommandHandler, MessageHandler, filters

from anonmail.bot.notifier import AdminNotifier
from anonmail.bot.permissions import check_forward_chat_rights
from anonmail.bot.telegram_handler import handle_error, handle_message, handle_ok, handle_start
from anonmail.config import DEFAULT_CONFIG_PATH, load_config
from anonmail.core.errors import ChatPermissionError, ConfigError, StoreError
from anonmail.core.router import Router
from anonmail.memory.access import AccessGate
from anonmail.memory.database import init_db
from anonmail.memory.ledger import Ledger

COMMANDS = [BotCommand("ok", "check if bot is alive")]


def build_application(cfg, ledger, gate):
    async def post_init(app: Application):
        await check_forward_chat_rights(app.bot, cfg.forward_chat_id)
        notifier = AdminNotifier(app.bot, cfg.admin_list)
        app.bot_data["router"] = Router(ledger, gate, cfg.forward_chat_id, cfg.admin_list, notifier)
        app.bot_data["start_message"] = cfg.start_message
        try:
            await app.bot.set_my_commands(COMMANDS)
        except TelegramError as e:
            await notifier.alert(str(e), "while setting commands")

    app = Application.builder().token(cfg.token).post_init(post_init).build()
    app.add_handler(CommandHandler("start", handle_start))
    app.add_handler(CommandHandler("ok", handle_ok))
    app.add_handler(MessageHandler(filters.UpdateType.MESSAGE & ~filters.StatusUpdate.ALL, handle_message))
    app.add_error_handler(handle_error)
    return app


def main(argv=None):
    parser = argparse.ArgumentParser(prog="anonmail")
    parser.add_argument(
        "--cfg", default=DEFAULT_CONFIG_PATH,
        help="path to the config file (may be useful to run multiple bots in parallel)",
    )
    args = parser.parse_args(argv)

    try:
        cfg = load_config(args.cfg)
    except ConfigError as e:
        print(f"ERROR: {e}")
        return 1

    print("Starting anonmail...")
    print(f"Forward chat: {cfg.forward_chat_id}")
    print(f"Admins: {cfg.admin_list}")
    print(f"Redis: {cfg.redis_database_address} db {cfg.redis_database_id}")

    try:
        db = init_db(cfg.redis_database_address, cfg.redis_database_id)
        gate = AccessGate(db, cfg.forward_chat_id)
        gate.seed()
    except (ConfigError, StoreError) as e:
        print(f"ERROR: {e}")
        return 1
    ledger = Ledger(db, cfg.forward_chat_id, cfg.record_ttl)

    app = build_application(cfg, ledger, gate)
    print("Bot is running.")
    try:
        app.run_polling(allowed_updates=["message"])
    except ChatPermissionError as e:
        print(f"ERROR: forward chat rights: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
