"""Data models persisted in the JSON store."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

ChatId = Union[int, str]


@dataclass
class Flashcard:
    """A single generated word with its pronunciation and translation."""
    word: Optional[str] = None
    trans: Optional[str] = None
    translation: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Flashcard":
        # Missing fields are kept as None rather than rejected
        return cls(
            word=data.get("word"),
            trans=data.get("trans"),
            translation=data.get("translation"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"word": self.word, "trans": self.trans, "translation": self.translation}


@dataclass
class UserState:
    """Per-chat learning state."""
    is_active: bool = False
    today_words: List[Flashcard] = field(default_factory=list)
    used_words: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserState":
        return cls(
            is_active=bool(data.get("isActive", False)),
            today_words=[Flashcard.from_dict(w) for w in data.get("todayWords", [])],
            used_words=list(data.get("usedWords", [])),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isActive": self.is_active,
            "todayWords": [w.to_dict() for w in self.today_words],
            "usedWords": list(self.used_words),
        }


@dataclass
class Brain:
    """Root of the JSON document: every known chat keyed by its id."""
    users: Dict[str, UserState] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Brain":
        users = data.get("users") or {}
        return cls(users={chat_id: UserState.from_dict(u) for chat_id, u in users.items()})

    def to_dict(self) -> Dict[str, Any]:
        return {"users": {chat_id: u.to_dict() for chat_id, u in self.users.items()}}

    def get_user(self, chat_id: ChatId) -> Optional[UserState]:
        """Get user state by chat id, None if the chat is unknown."""
        return self.users.get(str(chat_id))

    def set_user(self, chat_id: ChatId, user: UserState) -> None:
        self.users[str(chat_id)] = user
