"""Telegram command handlers."""
import logging

from telegram import Update
from telegram.ext import Application, CallbackContext, CommandHandler, MessageHandler, filters

from polbot.services.flashcard_service import FlashcardService
from polbot.services.notification_service import START_BUTTON, STOP_BUTTON

# Get logger for this module
logger = logging.getLogger(__name__)

# Key of the FlashcardService in application.bot_data
FLASHCARDS = "flashcards"


def get_service(context: CallbackContext) -> FlashcardService:
    return context.bot_data[FLASHCARDS]


async def log_received(update: Update, context_type: str) -> None:
    """Log message."""
    user = update.effective_user
    username = user.username if user else None
    logger.info(f"Received @{context_type:8} from user {username} in chat {update.effective_chat.id}")


async def handle_start(update: Update, context: CallbackContext) -> None:
    """Start sending words to the chat."""
    await log_received(update, "start")
    await get_service(context).start(update.effective_chat.id)


async def handle_stop(update: Update, context: CallbackContext) -> None:
    """Stop sending words to the chat."""
    await log_received(update, "stop")
    await get_service(context).stop(update.effective_chat.id)


def register_handlers(application: Application, service: FlashcardService) -> None:
    """Attach the service and route commands and keyboard buttons to it."""
    application.bot_data[FLASHCARDS] = service
    application.add_handler(CommandHandler("start", handle_start))
    application.add_handler(CommandHandler("stop", handle_stop))
    # Reply keyboard buttons arrive as plain text
    application.add_handler(MessageHandler(filters.Text([START_BUTTON]), handle_start))
    application.add_handler(MessageHandler(filters.Text([STOP_BUTTON]), handle_stop))
