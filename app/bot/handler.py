from datetime import datetime

from loguru import logger
from telegram import Update
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from app.config import get_settings
from app.deps import service

settings = get_settings()

COMMANDS = ["start", "help", "balances", "balance", "settled", "undo"]


async def _reply(update: Update) -> None:
    """Run the message through the lending service and send back its answer."""
    message = update.effective_message
    if message is None or not message.text:
        return
    chat_id = str(update.effective_chat.id)
    username = update.effective_user.username if update.effective_user else None
    answer = service.handle_text(chat_id, message.text, now=datetime.now(), username=username)
    try:
        await message.reply_text(answer)
    except Exception as e:
        logger.error("Failed to send reply to {}: {}", chat_id, e)


async def command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle every bot command; the service does the dispatching."""
    await _reply(update)


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle incoming text messages — lending entries."""
    await _reply(update)


def build_bot_app() -> Application:
    """Build and return the Telegram bot application."""
    app = Application.builder().token(settings.telegram_bot_token).build()

    app.add_handler(CommandHandler(COMMANDS, command))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_message))

    return app
