"""Tests for content generation service."""
from typing import Generator
from unittest.mock import AsyncMock, Mock, patch

import pytest

from polbot.models.models import Flashcard
from polbot.services.content_generator import ContentGenerator

REPLY = """Ось твої слова:
[{"word": "kot", "trans": "[кот]", "translation": "кіт"},
 {"word": "pies", "trans": "[пєс]", "translation": "пес"},
 {"word": "dom", "trans": "[дом]", "translation": "дім"}]
Успіхів!"""


@pytest.fixture
def mock_genai() -> Generator[Mock, None, None]:
    with patch("polbot.services.content_generator.genai") as genai:
        yield genai


@pytest.fixture
def generator(mock_genai: Mock) -> ContentGenerator:
    return ContentGenerator(api_key="test-key", learner_context="Учень: тест.")


def test_requires_api_key(mock_genai: Mock) -> None:
    with pytest.raises(ValueError):
        ContentGenerator(api_key="")


def test_configures_model(mock_genai: Mock) -> None:
    generator = ContentGenerator(api_key="test-key", model_name="gemini-test")

    mock_genai.configure.assert_called_once_with(api_key="test-key")
    mock_genai.GenerativeModel.assert_called_once_with("gemini-test")
    assert generator.model is mock_genai.GenerativeModel.return_value


def test_build_prompt_uses_last_50_words(generator: ContentGenerator) -> None:
    used_words = [f"word{i}" for i in range(60)]

    prompt = generator.build_prompt(used_words)

    assert "Учень: тест." in prompt
    assert "word10, word11" in prompt
    assert "word59." in prompt
    assert "word9," not in prompt
    assert "3 нових польських слів" in prompt


def test_build_prompt_short_history(generator: ContentGenerator) -> None:
    prompt = generator.build_prompt(["kot", "pies"])
    assert "Не використовуй слова: kot, pies." in prompt

    prompt = generator.build_prompt([])
    assert "Не використовуй слова: ." in prompt


def test_extract_cards_with_commentary() -> None:
    cards = ContentGenerator.extract_cards(REPLY)

    assert cards == [
        Flashcard(word="kot", trans="[кот]", translation="кіт"),
        Flashcard(word="pies", trans="[пєс]", translation="пес"),
        Flashcard(word="dom", trans="[дом]", translation="дім"),
    ]


@pytest.mark.parametrize(
    "text",
    [
        "Вибач, сьогодні без слів",
        "[not json]",
        '["kot", "pies"]',
        "",
    ],
)
def test_extract_cards_rejects(text: str) -> None:
    assert ContentGenerator.extract_cards(text) is None


def test_extract_cards_keeps_incomplete_items() -> None:
    cards = ContentGenerator.extract_cards('[{"word": "kot"}]')

    assert cards == [Flashcard(word="kot")]


@pytest.mark.asyncio
async def test_generate(generator: ContentGenerator) -> None:
    generator.model.generate_content_async = AsyncMock(return_value=Mock(text=REPLY))

    cards = await generator.generate(["kot"])

    assert [card.word for card in cards] == ["kot", "pies", "dom"]
    prompt = generator.model.generate_content_async.call_args.args[0]
    assert "Не використовуй слова: kot." in prompt


@pytest.mark.asyncio
async def test_generate_model_error(generator: ContentGenerator) -> None:
    generator.model.generate_content_async = AsyncMock(side_effect=RuntimeError("quota exceeded"))

    assert await generator.generate([]) is None


@pytest.mark.asyncio
async def test_generate_unparsable_reply(generator: ContentGenerator) -> None:
    generator.model.generate_content_async = AsyncMock(return_value=Mock(text="no brackets here"))

    assert await generator.generate([]) is None
