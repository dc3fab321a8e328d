from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar


T = TypeVar("T")


@dataclass
class ViewSlot(Generic[T]):
    """Current value of one view plus a generation counter.

    A result is installed only if the token it was issued with is still the
    latest one, so a completion that lands after a reset or a newer request
    is dropped.
    """

    value: Optional[T] = None
    busy: bool = False
    generation: int = 0

    def begin(self) -> int:
        self.generation += 1
        self.busy = True
        return self.generation

    def is_current(self, token: int) -> bool:
        return token == self.generation

    def resolve(self, token: int, value: T) -> bool:
        if not self.is_current(token):
            return False
        self.value = value
        self.busy = False
        return True

    def release(self, token: int) -> None:
        if self.is_current(token):
            self.busy = False

    def reset(self) -> None:
        self.generation += 1
        self.value = None
        self.busy = False


@dataclass
class Notice:
    title: str
    body: str
    error: bool = False


@dataclass
class NoticeQueue:
    items: list[Notice] = field(default_factory=list)

    def push(self, title: str, body: str, error: bool = False) -> None:
        self.items.append(Notice(title=title, body=body, error=error))

    def push_error(self, exc: Any, fallback_title: str = "Error") -> None:
        title = getattr(exc, "title", fallback_title)
        self.push(title, str(exc) or title, error=True)

    def drain(self) -> list[Notice]:
        out, self.items = self.items, []
        return out
