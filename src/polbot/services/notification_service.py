"""Service for delivering messages to Telegram chats."""
import html
import logging
from typing import Iterable

from telegram import Bot, ReplyKeyboardMarkup
from telegram.error import BadRequest, Forbidden, TelegramError

from polbot.models.models import ChatId, Flashcard
from polbot import monitoring

logger = logging.getLogger(__name__)

# Button texts
START_BUTTON = "🚀 Старт"
STOP_BUTTON = "🛑 Стоп"

MAIN_KEYBOARD = ReplyKeyboardMarkup(
    [[START_BUTTON, STOP_BUTTON]],
    resize_keyboard=True,
    is_persistent=True,
)


def format_card(card: Flashcard) -> str:
    """Format a flashcard as one HTML line."""
    return (
        f"🇵🇱 <b>{html.escape(str(card.word))}</b> "
        f"{html.escape(str(card.trans))} - {html.escape(str(card.translation))}"
    )


def format_cards(cards: Iterable[Flashcard]) -> str:
    """Format flashcards one per line."""
    return "\n".join(format_card(card) for card in cards)


class NotificationService:
    """Send messages to chats, logging delivery errors instead of raising them."""

    def __init__(self, bot: Bot):
        """Initialize the service with a Telegram bot instance."""
        self.bot = bot

    async def send(self, chat_id: ChatId, text: str, with_keyboard: bool = False) -> bool:
        """Send a message, returns True if Telegram accepted it."""
        kwargs = {"reply_markup": MAIN_KEYBOARD} if with_keyboard else {}
        try:
            await self.bot.send_message(chat_id=chat_id, text=text, parse_mode="HTML", **kwargs)
            return True
        except (Forbidden, BadRequest) as e:
            # Blocked bot, deleted chat or malformed message
            logger.error("Failed to send message to chat %s: %s", chat_id, str(e))
            monitoring.messages_failed.labels(error_type=type(e).__name__).inc()
        except TelegramError as e:
            # Network issues, flood control, etc.
            logger.error("Telegram error sending message to chat %s: %s", chat_id, str(e))
            monitoring.messages_failed.labels(error_type=type(e).__name__).inc()
        return False
