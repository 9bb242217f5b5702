"""Whole-file JSON persistence of per-chat state."""
import json
import logging
from pathlib import Path
from typing import Union

from polbot.models.models import Brain

logger = logging.getLogger(__name__)


class Store:
    """Load and save the whole database document.

    Every save rewrites the file in full. There is no caching and no locking,
    so concurrent writers follow last-writer-wins.
    """

    def __init__(self, path: Union[str, Path]):
        """Initialize the store with the path of the backing file."""
        self.path = Path(path)

    def load(self) -> Brain:
        """Read the document, healing a missing file or a missing ``users`` key.

        Raises:
            json.JSONDecodeError: if the file exists but is not valid JSON.
        """
        if not self.path.exists():
            return Brain()

        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)

        if "users" not in data:
            logger.warning("Storage file %s has no users mapping, starting empty", self.path)
            data["users"] = {}

        return Brain.from_dict(data)

    def save(self, brain: Brain) -> None:
        """Serialize and overwrite the backing file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(brain.to_dict(), f, indent=2, ensure_ascii=False)
        logger.debug("Saved %d users to %s", len(brain.users), self.path)
