"""Test configuration."""
import os
from pathlib import Path
from typing import List
from unittest.mock import AsyncMock

import pytest
from dotenv import load_dotenv
from faker import Faker

# Set test environment before any imports
os.environ["ENV"] = "test"

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from polbot.models.models import Flashcard, UserState
from polbot.models.store import Store
from polbot.services.notification_service import NotificationService
from polbot.services.session_registry import SessionRegistry
from polbot.tests.helpers import FakeClock

fake = Faker()


@pytest.fixture
def chat_id() -> int:
    return fake.random_int(min=1000, max=999999)


@pytest.fixture
def store(tmp_path: Path) -> Store:
    return Store(tmp_path / "brain.json")


@pytest.fixture
def notifier() -> AsyncMock:
    notifier = AsyncMock(spec=NotificationService)
    notifier.send.return_value = True
    return notifier


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def cards() -> List[Flashcard]:
    return [
        Flashcard(word="Dziękuję", trans="[джєнькує]", translation="Дякую"),
        Flashcard(word="samochód", trans="[самохуд]", translation="автомобіль"),
        Flashcard(word="syn", trans="[син]", translation="син"),
    ]


@pytest.fixture
def active_user(store: Store, chat_id: int, cards: List[Flashcard]) -> UserState:
    """Persist an active user with today's cards."""
    brain = store.load()
    user = UserState(is_active=True, today_words=cards, used_words=[c.word for c in cards])
    brain.set_user(chat_id, user)
    store.save(brain)
    return user
