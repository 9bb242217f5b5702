"""Tests for the main application."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from polbot.app import PolBot
from polbot.config import Settings


@pytest.fixture
def settings(tmp_path) -> Settings:
    settings = Settings()
    settings.bot.token = "test_token"
    settings.generation.api_key = "test_key"
    settings.storage.path = tmp_path / "brain.json"
    settings.server.metrics_port = None
    return settings


@pytest.fixture
def mock_app() -> AsyncMock:
    """Create a mock application with async methods."""
    mock_app = AsyncMock()
    mock_app.add_handler = MagicMock()
    mock_app.bot = MagicMock()
    mock_app.bot_data = {}
    mock_app.running = True
    mock_app.updater.running = True
    return mock_app


@pytest.fixture
def bot(settings: Settings, mock_app: AsyncMock):
    """Create a bot instance with mocked dependencies."""
    mock_builder = MagicMock()
    mock_builder.token.return_value.build.return_value = mock_app

    patches = [
        patch("polbot.app.Application.builder", return_value=mock_builder),
        patch("polbot.services.content_generator.genai"),
        patch("polbot.app.HealthServer", return_value=AsyncMock()),
    ]
    for p in patches:
        p.start()

    yield PolBot(settings)

    for p in patches:
        p.stop()


@pytest.mark.asyncio
async def test_start(bot: PolBot, mock_app: AsyncMock) -> None:
    """Test starting the bot."""
    await bot.start()

    assert bot.running
    assert bot.application is mock_app
    assert bot.cycle_scheduler is not None
    assert bot.daily_scheduler is not None
    assert "flashcards" in mock_app.bot_data
    assert mock_app.add_handler.call_count == 4
    mock_app.updater.start_polling.assert_awaited_once()
    bot.health_server.start.assert_awaited_once()

    # Verify no messages were sent
    mock_app.bot.send_message.assert_not_called()

    await bot.stop()


@pytest.mark.asyncio
async def test_stop(bot: PolBot, mock_app: AsyncMock) -> None:
    """Test stopping the bot."""
    await bot.start()
    await bot.stop()

    assert not bot.running
    assert bot.application is None
    assert bot.registry is None
    mock_app.shutdown.assert_awaited_once()


@pytest.mark.asyncio
async def test_start_when_already_running(bot: PolBot, mock_app: AsyncMock) -> None:
    await bot.start()
    await bot.start()

    mock_app.initialize.assert_awaited_once()
    await bot.stop()


@pytest.mark.asyncio
async def test_stop_when_not_running(bot: PolBot) -> None:
    await bot.stop()  # Should not raise or cause issues
    assert not bot.running


@pytest.mark.asyncio
async def test_start_without_token(bot: PolBot, settings: Settings) -> None:
    settings.bot.token = ""

    with pytest.raises(ValueError, match="TELEGRAM_BOT_TOKEN"):
        await bot.start()

    assert not bot.running
    assert bot.application is None
