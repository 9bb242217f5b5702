"""Flashcard generation service using Gemini."""
import json
import logging
import re
import time
from typing import List, Optional

import google.generativeai as genai

from polbot.models.models import Flashcard
from polbot import monitoring

logger = logging.getLogger(__name__)

# Greedy on purpose: the first "[" through the last "]" in the reply
JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")

TASK_TEMPLATE = """{context}
Задача: {count} польських слова JSON.

ЗАВДАННЯ:
Згенеруй JSON-масив із {count} нових польських слів.
Не використовуй слова: {ignore_list}.

СУВОРІ ВИМОГИ ДО ПОЛІВ:
1. "word": Польське слово.
2. "trans": Вимова записана УКРАЇНСЬКИМИ літерами (кирилицею).
   ⛔ ЗАБОРОНЕНО: IPA символи (типу [vdroʒeɲe]).
   ✅ ДОЗВОЛЕНО: Кирилиця (типу [вдроженє], [чешьчь]).
3. "translation": Переклад українською.

Приклад правильної відповіді:
[{{"word": "Dziękuję", "trans": "[джєнькує]", "translation": "Дякую"}}]

ВАЖЛИВО: Поверни тільки чистий JSON масив."""


class ContentGenerator:
    """Service for generating daily flashcards with a generative model."""

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-flash-latest",
        learner_context: str = "",
        history_window: int = 50,
        words_per_day: int = 3,
    ):
        if not api_key:
            raise ValueError("Gemini API key is required")

        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model_name)
        self.learner_context = learner_context
        self.history_window = history_window
        self.words_per_day = words_per_day
        logger.info("ContentGenerator initialized with model %s", model_name)

    def build_prompt(self, used_words: List[str]) -> str:
        """Build the generation prompt, excluding the most recent words."""
        ignore_list = ", ".join(word for word in used_words[-self.history_window:] if word)
        return TASK_TEMPLATE.format(
            context=self.learner_context,
            count=self.words_per_day,
            ignore_list=ignore_list,
        )

    @staticmethod
    def extract_cards(text: str) -> Optional[List[Flashcard]]:
        """Pull the JSON array out of a free-form model reply.

        Returns None when the reply holds no bracketed array, the array is
        not valid JSON, or its items are not objects. Items with missing
        fields are accepted as they are.
        """
        match = JSON_ARRAY_RE.search(text or "")
        if not match:
            logger.warning("Model reply contains no JSON array: %.200s", text)
            return None

        try:
            items = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            logger.warning("Model reply is not valid JSON: %s", e)
            return None

        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            logger.warning("Model reply is not an array of flashcards: %.200s", match.group(0))
            return None

        return [Flashcard.from_dict(item) for item in items]

    async def generate(self, used_words: List[str]) -> Optional[List[Flashcard]]:
        """Generate a new set of flashcards, None on any failure."""
        prompt = self.build_prompt(used_words)
        started = time.monotonic()
        try:
            response = await self.model.generate_content_async(prompt)
            text = response.text
        except Exception as e:
            logger.error("AI error while generating words: %s", e)
            monitoring.generation_requests.labels(status="error").inc()
            return None
        finally:
            monitoring.generation_duration.observe(time.monotonic() - started)

        cards = self.extract_cards(text)
        if cards is None:
            monitoring.generation_requests.labels(status="unparsable").inc()
            return None

        monitoring.generation_requests.labels(status="ok").inc()
        logger.info("Generated words: %s", ", ".join(str(card.word) for card in cards))
        return cards
