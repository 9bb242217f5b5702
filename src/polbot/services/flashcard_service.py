"""Service handling the start and stop commands of a chat."""
import logging

from polbot.models.models import ChatId, UserState
from polbot.models.store import Store
from polbot.services.content_generator import ContentGenerator
from polbot.services.notification_service import NotificationService, format_cards
from polbot.services.scheduler_service import CycleScheduler, DailyRefreshScheduler
from polbot.services.session_registry import SessionRegistry

logger = logging.getLogger(__name__)

MSG_STARTING = "🚀 Стартуємо! (24h таймер + динамічний цикл)"
MSG_AI_ERROR = "AI Error."
MSG_TODAY_WORDS = "Твої слова на цю добу:\n"
MSG_STOPPED = "🛑 Зупинено. До зустрічі!"


class FlashcardService:
    """Orchestrates storage, generation and both schedulers for a chat."""

    def __init__(
        self,
        store: Store,
        generator: ContentGenerator,
        notifier: NotificationService,
        registry: SessionRegistry,
        cycle_scheduler: CycleScheduler,
        daily_scheduler: DailyRefreshScheduler,
    ):
        self.store = store
        self.generator = generator
        self.notifier = notifier
        self.registry = registry
        self.cycle_scheduler = cycle_scheduler
        self.daily_scheduler = daily_scheduler

    async def start(self, chat_id: ChatId) -> bool:
        """(Re)start learning: new words, a new cycle and a new daily timer.

        Returns False if generation failed; stored state is left untouched then.
        """
        async with self.registry.lock(chat_id):
            self.registry.cancel(chat_id)
            await self.notifier.send(chat_id, MSG_STARTING, with_keyboard=True)

            brain = self.store.load()
            existing = brain.get_user(chat_id)
            used_words = list(existing.used_words) if existing else []

            cards = await self.generator.generate(used_words)
            if cards is None:
                logger.warning("Could not generate words for chat %s", chat_id)
                await self.notifier.send(chat_id, MSG_AI_ERROR, with_keyboard=True)
                return False

            # Reload, the generation call may have taken a while
            brain = self.store.load()
            brain.set_user(
                chat_id,
                UserState(
                    is_active=True,
                    today_words=cards,
                    used_words=used_words + [card.word for card in cards],
                ),
            )
            self.store.save(brain)
            logger.info("Chat %s started with %d words", chat_id, len(cards))

            await self.notifier.send(chat_id, MSG_TODAY_WORDS + format_cards(cards))

            self.cycle_scheduler.arm(chat_id)
            self.daily_scheduler.arm(chat_id)
            return True

    async def stop(self, chat_id: ChatId) -> None:
        """Deactivate the chat and cancel its timers, keeping the word history."""
        async with self.registry.lock(chat_id):
            brain = self.store.load()
            user = brain.get_user(chat_id)
            if user is not None:
                user.is_active = False
                self.store.save(brain)

            self.registry.discard(chat_id)
            logger.info("Chat %s stopped", chat_id)

        await self.notifier.send(chat_id, MSG_STOPPED, with_keyboard=True)
