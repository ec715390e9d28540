"""
client/events.py -- The "unauthorized" signal shared by the HTTP layer and the session.

Pattern: Observer. ApiClient publishes an UnauthorizedEvent whenever the
server answers 401; SessionManager subscribes and tears the session down.
Both hold a reference to the same AuthEvents instance, handed to them by the
app shell, so there is no global event bus.
"""

import logging
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger("recordkeeper.client.events")

DEFAULT_UNAUTHORIZED_MESSAGE = "Your session has expired or is no longer valid."


@dataclass(frozen=True)
class UnauthorizedEvent:
    """A 401 was received while the user was on `path`."""

    path: str
    message: str = DEFAULT_UNAUTHORIZED_MESSAGE


Subscriber = Callable[[UnauthorizedEvent], None]


class AuthEvents:
    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback. Returns a function that removes it again."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: UnauthorizedEvent) -> None:
        """Deliver the event to every subscriber in registration order."""
        logger.info("Unauthorized response while on %s", event.path)
        for callback in list(self._subscribers):
            callback(event)
