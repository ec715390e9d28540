"""
client/notifications.py -- Transient user-facing messages.

One NotificationService is created by the app shell and handed to every
screen. A notification lives for duration_ms (default 5000) and is dropped
the next time active() is read after it expires; duration_ms=0 keeps it
until dismissed. The optional sink is called with each new notification so
the terminal can print it immediately.
"""

import itertools
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger("recordkeeper.client.notifications")

DEFAULT_DURATION_MS = 5000

KINDS = ("success", "error", "warning", "info")


@dataclass
class Notification:
    id: int
    kind: str
    message: str
    title: Optional[str]
    duration_ms: int
    created_at: float

    def expired(self, now: float) -> bool:
        if self.duration_ms <= 0:
            return False
        return (now - self.created_at) * 1000 >= self.duration_ms


class NotificationService:
    def __init__(
        self,
        default_duration_ms: int = DEFAULT_DURATION_MS,
        sink: Optional[Callable[[Notification], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_duration_ms = default_duration_ms
        self.sink = sink
        self._clock = clock
        self._ids = itertools.count(1)
        self._items: list[Notification] = []

    def notify(
        self,
        kind: str,
        message: str,
        title: Optional[str] = None,
        duration_ms: Optional[int] = None,
    ) -> int:
        if kind not in KINDS:
            raise ValueError(f"Unknown notification kind: {kind!r}")
        note = Notification(
            id=next(self._ids),
            kind=kind,
            message=message,
            title=title,
            duration_ms=self.default_duration_ms if duration_ms is None else duration_ms,
            created_at=self._clock(),
        )
        self._items.append(note)
        logger.debug("Notification %d (%s): %s", note.id, kind, message)
        if self.sink is not None:
            self.sink(note)
        return note.id

    def success(self, message: str, title: Optional[str] = None, duration_ms: Optional[int] = None) -> int:
        return self.notify("success", message, title, duration_ms)

    def error(self, message: str, title: Optional[str] = None, duration_ms: Optional[int] = None) -> int:
        return self.notify("error", message, title, duration_ms)

    def warning(self, message: str, title: Optional[str] = None, duration_ms: Optional[int] = None) -> int:
        return self.notify("warning", message, title, duration_ms)

    def info(self, message: str, title: Optional[str] = None, duration_ms: Optional[int] = None) -> int:
        return self.notify("info", message, title, duration_ms)

    def dismiss(self, notification_id: int) -> None:
        self._items = [n for n in self._items if n.id != notification_id]

    def clear(self) -> None:
        self._items.clear()

    def active(self) -> list[Notification]:
        """Notifications that have not expired or been dismissed, oldest first."""
        now = self._clock()
        self._items = [n for n in self._items if not n.expired(now)]
        return list(self._items)
