"""Main application entry point."""
import logging
from typing import Optional

from telegram.ext import Application

from polbot.bot import register_handlers
from polbot.config import Settings, settings as default_settings
from polbot.health import HealthServer
from polbot.models.store import Store
from polbot.monitoring import start_monitoring
from polbot.services.content_generator import ContentGenerator
from polbot.services.flashcard_service import FlashcardService
from polbot.services.notification_service import NotificationService
from polbot.services.scheduler_service import CycleScheduler, DailyRefreshScheduler
from polbot.services.session_registry import SessionRegistry


class PolBot:
    """Main application class."""

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize the application."""
        self.settings = settings or default_settings
        self.application: Optional[Application] = None
        self.registry: Optional[SessionRegistry] = None
        self.cycle_scheduler: Optional[CycleScheduler] = None
        self.daily_scheduler: Optional[DailyRefreshScheduler] = None
        self.health_server: Optional[HealthServer] = None
        self.running = False
        self.logger = logging.getLogger(__name__)

    async def start(self) -> None:
        """Start the application."""
        if self.running:
            return

        try:
            self.settings.validate()

            store = Store(self.settings.storage.path)
            generation = self.settings.generation
            generator = ContentGenerator(
                api_key=generation.api_key,
                model_name=generation.model_name,
                learner_context=generation.learner_context,
                history_window=generation.history_window,
                words_per_day=generation.words_per_day,
            )
            self.logger.info("Storage at %s", store.path)

            # Create application
            self.application = Application.builder().token(self.settings.bot.token).build()
            self.logger.info("Application created")

            notifier = NotificationService(self.application.bot)
            self.registry = SessionRegistry()
            self.cycle_scheduler = CycleScheduler(
                store,
                notifier,
                self.registry,
                max_span=self.settings.schedule.max_span,
                slot_floors=self.settings.schedule.slot_floors,
            )
            self.daily_scheduler = DailyRefreshScheduler(
                store,
                generator,
                notifier,
                self.registry,
                interval=self.settings.schedule.daily_refresh_interval,
            )
            service = FlashcardService(
                store, generator, notifier, self.registry, self.cycle_scheduler, self.daily_scheduler
            )
            register_handlers(self.application, service)
            self.logger.info("Handlers added")

            self.health_server = HealthServer(self.settings.server.port)
            await self.health_server.start()

            if self.settings.server.metrics_port is not None:
                start_monitoring(self.settings.server.metrics_port)
                self.logger.info("Metrics exported on port %d", self.settings.server.metrics_port)

            # Start application
            await self.application.initialize()
            await self.application.start()
            await self.application.updater.start_polling()
            self.logger.info("Application started")

            self.running = True

        except Exception as e:
            self.logger.error("Failed to start application: %s", str(e))
            await self._shutdown()
            raise

    async def stop(self) -> None:
        """Stop the application."""
        if not self.running:
            return
        await self._shutdown()

    async def _shutdown(self) -> None:
        try:
            # Timers are not persisted, active chats need /start after a restart
            if self.registry:
                self.registry.clear()
                self.registry = None
            for scheduler in (self.cycle_scheduler, self.daily_scheduler):
                if scheduler:
                    await scheduler.cancel_pending()
            self.cycle_scheduler = None
            self.daily_scheduler = None
            self.logger.info("Schedulers stopped")

            if self.health_server:
                await self.health_server.stop()
                self.health_server = None

            # Stop application
            if self.application:
                if self.application.updater and self.application.updater.running:
                    await self.application.updater.stop()
                if self.application.running:
                    await self.application.stop()
                await self.application.shutdown()
                self.application = None
                self.logger.info("Application stopped")

            self.running = False

        except Exception as e:
            self.logger.error("Error while stopping application: %s", str(e))
            self.running = False
            self.application = None
            raise
