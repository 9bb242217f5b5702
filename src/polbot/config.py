"""Configuration settings for the bot."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)

DEFAULT_LEARNER_CONTEXT = (
    "Ти вчитель польської мови. Учень: Андрій (33 роки, Świdnica, Польща).\n"
    "Інтереси: Full Stack JS, авто Seat Ibiza 2003, син 3.6 роки, побут."
)

# Scheduling settings
SLOT_FLOORS = (10, 20, 30)  # seconds before each of the three deliveries may fire
CYCLE_MAX_SPAN = 2 * 60 * 60  # seconds
DAILY_REFRESH_INTERVAL = 24 * 60 * 60  # seconds


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default)


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = field(default_factory=lambda: os.getenv("LOG_DIR"))
    rotation: str = field(default_factory=lambda: _env("LOG_ROTATION", "midnight"))
    interval: int = field(default_factory=lambda: int(_env("LOG_INTERVAL", "1")))
    backup_count: int = field(default_factory=lambda: int(_env("LOG_BACKUP_COUNT", "7")))


@dataclass
class BotSettings:
    """Bot configuration settings."""
    token: str = field(default_factory=lambda: _env("TELEGRAM_BOT_TOKEN"))


@dataclass
class GenerationSettings:
    """Flashcard generation settings."""
    api_key: str = field(default_factory=lambda: _env("GEMINI_API_KEY"))
    model_name: str = field(default_factory=lambda: _env("GEMINI_MODEL", "gemini-flash-latest"))
    learner_context: str = field(
        default_factory=lambda: _env("LEARNER_CONTEXT", DEFAULT_LEARNER_CONTEXT)
    )
    history_window: int = field(default_factory=lambda: int(_env("HISTORY_WINDOW", "50")))
    words_per_day: int = field(default_factory=lambda: int(_env("WORDS_PER_DAY", "3")))


@dataclass
class ScheduleSettings:
    """Delivery cycle and daily refresh settings."""
    max_span: float = field(
        default_factory=lambda: float(_env("CYCLE_MAX_SPAN_SECONDS", str(CYCLE_MAX_SPAN)))
    )
    slot_floors: tuple[float, ...] = SLOT_FLOORS
    daily_refresh_interval: float = field(
        default_factory=lambda: float(_env("DAILY_REFRESH_SECONDS", str(DAILY_REFRESH_INTERVAL)))
    )


@dataclass
class StorageSettings:
    """JSON storage settings."""
    path: Path = field(default_factory=lambda: Path(_env("STORAGE_FILE", "./brain.json")))


@dataclass
class ServerSettings:
    """Health check and metrics endpoints."""
    port: int = field(default_factory=lambda: int(_env("PORT", "3000")))
    metrics_port: Optional[int] = field(
        default_factory=lambda: int(os.environ["METRICS_PORT"]) if os.getenv("METRICS_PORT") else None
    )


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    bot: BotSettings = field(default_factory=BotSettings)
    generation: GenerationSettings = field(default_factory=GenerationSettings)
    schedule: ScheduleSettings = field(default_factory=ScheduleSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    server: ServerSettings = field(default_factory=ServerSettings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if not self.bot.token:
            raise ValueError("TELEGRAM_BOT_TOKEN is required")

        if not self.generation.api_key:
            raise ValueError("GEMINI_API_KEY is required")

        if self.generation.history_window < 1:
            raise ValueError("HISTORY_WINDOW must be positive")

        if self.generation.words_per_day != len(self.schedule.slot_floors):
            raise ValueError(
                f"WORDS_PER_DAY must be {len(self.schedule.slot_floors)} to match the delivery slots"
            )

        if self.schedule.max_span <= 0:
            raise ValueError("CYCLE_MAX_SPAN_SECONDS must be positive")

        if self.schedule.daily_refresh_interval <= 0:
            raise ValueError("DAILY_REFRESH_SECONDS must be positive")


# Create global settings instance
settings = Settings()
