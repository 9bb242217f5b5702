"""Services for the delivery cycle and the daily refresh timers."""
import asyncio
import logging
import random
from typing import Any, Callable, Coroutine, List, Optional, Protocol, Sequence, Set

from polbot.models.models import ChatId
from polbot.models.store import Store
from polbot.services.content_generator import ContentGenerator
from polbot.services.notification_service import NotificationService, format_card, format_cards
from polbot.services.session_registry import SessionRegistry, TimerHandle
from polbot import monitoring

logger = logging.getLogger(__name__)

NEW_DAY_BANNER = "☀️ Новий день — нові слова! (Цикл продовжується без зупинки)"


class Clock(Protocol):
    """Schedules a plain callback after a delay in seconds (asyncio event loop)."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class TimerScheduler:
    """Base class running coroutine callbacks on one-shot timers.

    Cancelling a returned handle only drops the future firing. A callback
    that already started runs to completion as a tracked task.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock
        self.tasks: Set[asyncio.Task] = set()

    @property
    def clock(self) -> Clock:
        return self._clock or asyncio.get_running_loop()

    def _schedule(
        self,
        delay: float,
        coro: Callable[..., Coroutine[Any, Any, None]],
        *args: Any,
    ) -> TimerHandle:
        return self.clock.call_later(delay, self._fire, coro, *args)

    def _fire(self, coro: Callable[..., Coroutine[Any, Any, None]], *args: Any) -> None:
        task = asyncio.ensure_future(coro(*args))
        self.tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self.tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Error in scheduled task: %s", exc, exc_info=exc)

    async def join(self) -> None:
        """Wait until every fired callback has finished, including ones they fire."""
        while True:
            pending = [task for task in self.tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def cancel_pending(self) -> None:
        """Cancel callbacks that are still running."""
        tasks = list(self.tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


class CycleScheduler(TimerScheduler):
    """Delivers today's cards at random offsets and re-arms after the last one."""

    def __init__(
        self,
        store: Store,
        notifier: NotificationService,
        registry: SessionRegistry,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        max_span: float = 2 * 60 * 60,
        slot_floors: Sequence[float] = (10, 20, 30),
    ):
        super().__init__(clock)
        self.store = store
        self.notifier = notifier
        self.registry = registry
        self.rng = rng or random.Random()
        self.max_span = max_span
        self.slot_floors = tuple(slot_floors)

    def draw_delays(self) -> List[float]:
        """Draw one delay per slot and sort them so deliveries follow slot order."""
        return sorted(floor + self.rng.random() * self.max_span for floor in self.slot_floors)

    def arm(self, chat_id: ChatId) -> bool:
        """Start a new cycle for an active chat, returns False if nothing was scheduled."""
        user = self.store.load().get_user(chat_id)
        if user is None or not user.is_active:
            logger.info("Chat %s is not active, cycle not armed", chat_id)
            return False

        delays = self.draw_delays()
        logger.info(
            "New cycle for chat %s, words in: %s min",
            chat_id,
            ", ".join(f"{delay / 60:.1f}" for delay in delays),
        )

        session = self.registry.get_or_create(chat_id)
        session.cancel_messages()
        generation = session.cycle_generation
        session.message_timers = [
            self._schedule(delay, self._deliver, chat_id, index, generation)
            for index, delay in enumerate(delays)
        ]
        monitoring.cycles_armed.inc()
        return True

    async def _deliver(self, chat_id: ChatId, index: int, generation: int) -> None:
        try:
            # Cards may have been refreshed since the cycle was armed
            user = self.store.load().get_user(chat_id)
            if user is not None and index < len(user.today_words):
                if await self.notifier.send(chat_id, format_card(user.today_words[index])):
                    monitoring.cards_delivered.inc()
        finally:
            if index == len(self.slot_floors) - 1:
                session = self.registry.get(chat_id)
                if session is None or session.cycle_generation != generation:
                    logger.info("Cycle of chat %s was replaced or stopped, not re-arming", chat_id)
                else:
                    logger.info("Last word of the cycle sent to chat %s, re-arming", chat_id)
                    self.arm(chat_id)


class DailyRefreshScheduler(TimerScheduler):
    """Regenerates the day's cards on a fixed period, re-arming forever."""

    def __init__(
        self,
        store: Store,
        generator: ContentGenerator,
        notifier: NotificationService,
        registry: SessionRegistry,
        clock: Optional[Clock] = None,
        interval: float = 24 * 60 * 60,
    ):
        super().__init__(clock)
        self.store = store
        self.generator = generator
        self.notifier = notifier
        self.registry = registry
        self.interval = interval

    def arm(self, chat_id: ChatId) -> None:
        """Schedule the next refresh one interval from now."""
        session = self.registry.get_or_create(chat_id)
        session.cancel_daily()
        session.daily_timer = self._schedule(
            self.interval, self._refresh, chat_id, session.daily_generation
        )

    async def _refresh(self, chat_id: ChatId, generation: int) -> None:
        logger.info("Daily refresh for chat %s", chat_id)
        async with self.registry.lock(chat_id):
            session = self.registry.get(chat_id)
            if session is None or session.daily_generation != generation:
                # Restarted or stopped while this run waited for the lock
                logger.info("Daily timer of chat %s was replaced or stopped, skipping", chat_id)
                return
            try:
                await self.refresh(chat_id)
            finally:
                self.arm(chat_id)

    async def refresh(self, chat_id: ChatId) -> bool:
        """Replace today's cards for an active chat, returns True on success."""
        brain = self.store.load()
        user = brain.get_user(chat_id)
        if user is None or not user.is_active:
            logger.info("Chat %s is not active, skipping refresh", chat_id)
            monitoring.daily_refreshes.labels(status="inactive").inc()
            return False

        cards = await self.generator.generate(list(user.used_words))
        if cards is None:
            logger.warning("Generation failed for chat %s, keeping yesterday's words", chat_id)
            monitoring.daily_refreshes.labels(status="failed").inc()
            return False

        user.today_words = cards
        user.used_words.extend(card.word for card in cards)
        self.store.save(brain)
        monitoring.daily_refreshes.labels(status="ok").inc()

        await self.notifier.send(chat_id, NEW_DAY_BANNER)
        await self.notifier.send(chat_id, format_cards(cards))
        return True
