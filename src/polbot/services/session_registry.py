"""Runtime registry of per-chat timers."""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol

from polbot.models.models import ChatId
from polbot import monitoring

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """Anything that can cancel a pending callback (asyncio.TimerHandle)."""

    def cancel(self) -> None: ...


@dataclass
class ChatSession:
    """Pending timers of one chat.

    The generation counters change on every cancel, so a callback that was
    already running when its timers were replaced can tell it is stale.
    """
    message_timers: List[TimerHandle] = field(default_factory=list)
    daily_timer: Optional[TimerHandle] = None
    cycle_generation: int = 0
    daily_generation: int = 0

    def cancel_messages(self) -> None:
        for timer in self.message_timers:
            timer.cancel()
        self.message_timers = []
        self.cycle_generation += 1

    def cancel_daily(self) -> None:
        if self.daily_timer is not None:
            self.daily_timer.cancel()
            self.daily_timer = None
        self.daily_generation += 1

    def cancel(self) -> None:
        """Cancel every pending timer of the chat."""
        self.cancel_messages()
        self.cancel_daily()


class SessionRegistry:
    """Sessions and locks keyed by chat id.

    Sessions are not persisted: after a restart no chat has armed timers.
    Locks outlive sessions so that a stop waiting on a running start still
    serializes with it.
    """

    def __init__(self):
        self.sessions: Dict[str, ChatSession] = {}
        self.locks: Dict[str, asyncio.Lock] = {}

    def get(self, chat_id: ChatId) -> Optional[ChatSession]:
        return self.sessions.get(str(chat_id))

    def get_or_create(self, chat_id: ChatId) -> ChatSession:
        key = str(chat_id)
        if key not in self.sessions:
            self.sessions[key] = ChatSession()
            monitoring.active_sessions.set(len(self.sessions))
        return self.sessions[key]

    def lock(self, chat_id: ChatId) -> asyncio.Lock:
        """Lock guarding read-modify-write of the chat's stored state."""
        return self.locks.setdefault(str(chat_id), asyncio.Lock())

    def cancel(self, chat_id: ChatId) -> None:
        """Cancel the chat's pending timers but keep its session."""
        session = self.get(chat_id)
        if session is not None:
            session.cancel()
            logger.debug("Cancelled timers for chat %s", chat_id)

    def discard(self, chat_id: ChatId) -> None:
        """Cancel the chat's pending timers and forget the session."""
        session = self.sessions.pop(str(chat_id), None)
        if session is not None:
            session.cancel()
            monitoring.active_sessions.set(len(self.sessions))
            logger.debug("Discarded session for chat %s", chat_id)

    def clear(self) -> None:
        """Cancel everything, used on shutdown."""
        for chat_id in list(self.sessions):
            self.discard(chat_id)
