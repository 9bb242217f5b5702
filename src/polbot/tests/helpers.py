"""Test doubles shared by the test modules."""
from typing import Any, Callable, List, Tuple
from unittest.mock import AsyncMock, Mock


class FakeClock:
    """Records call_later requests instead of waiting for them."""

    def __init__(self):
        self.calls: List[Tuple[float, Callable[..., Any], tuple, Mock]] = []

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> Mock:
        handle = Mock()
        self.calls.append((delay, callback, args, handle))
        return handle

    @property
    def delays(self) -> List[float]:
        return [delay for delay, _, _, _ in self.calls]

    @property
    def handles(self) -> List[Mock]:
        return [handle for _, _, _, handle in self.calls]

    def fire(self, index: int) -> None:
        _, callback, args, _ = self.calls[index]
        callback(*args)


def sent_texts(notifier: AsyncMock) -> List[str]:
    """Texts passed to notifier.send in call order."""
    return [c.args[1] for c in notifier.send.call_args_list]
