"""
client/app.py -- App shell: wires the client together and guards navigation.

App owns one of each collaborator (storage, events, API client, session,
notifications, theme) and the current path. navigate() is the only way the
current path changes, and it applies the route guard:

  /                      -> /read
  /login                 -> /read when already authenticated
  /read /create /profile /update/<id>
                         -> /login when not authenticated (the requested
                            path is stashed and restored after login)
  anything else          -> the not-found route

The HTTP wrapper reads current_path through a callback, so a 401 always
records the path the user was actually on.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from client.config import ClientSettings, get_client_settings
from client.events import AuthEvents, UnauthorizedEvent
from client.http import ApiClient
from client.notifications import Notification, NotificationService
from client.screens import HOME_PATH, RecordListScreen
from client.session import LOGIN_PATH, SessionManager
from client.storage import REDIRECT_KEY, LocalStorage
from client.theme import ThemeManager

logger = logging.getLogger("recordkeeper.client.app")

NOT_FOUND_PATH = "/404"

_STATIC_PROTECTED = {"/read": "read", "/create": "create", "/profile": "profile"}
_UPDATE_RE = re.compile(r"^/update/(\d+)$")


@dataclass(frozen=True)
class Route:
    path: str
    name: str
    params: dict = field(default_factory=dict)


class App:
    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        storage: Optional[LocalStorage] = None,
        sink: Optional[Callable[[Notification], None]] = None,
    ) -> None:
        settings = settings or get_client_settings()
        self.storage = storage if storage is not None else LocalStorage(settings.state_path)
        self.events = AuthEvents()
        self.path = "/"
        self.api = ApiClient(
            self.storage,
            self.events,
            base_url=settings.api_base_url,
            timeout=settings.timeout_seconds,
            current_path=lambda: self.path,
        )
        self.session = SessionManager(self.api, self.storage, self.events)
        self.notifications = NotificationService(settings.notification_duration_ms, sink=sink)
        self.theme = ThemeManager(self.storage)
        self.records = RecordListScreen(self.api, self.notifications)
        self._checking_auth = False
        self._unsubscribe = self.events.subscribe(self._on_unauthorized)

    def start(self) -> Route:
        """Validate any stored session, then land on the home route."""
        self._checking_auth = True
        try:
            self.session.check_auth()
        finally:
            self._checking_auth = False
        if self.session.error:
            self.notifications.warning(self.session.error)
        return self.navigate("/")

    def resolve(self, path: str) -> Route:
        path = (path or "/").strip()
        if len(path) > 1:
            path = path.rstrip("/")
        authenticated = self.session.is_authenticated

        if path == "/":
            path = HOME_PATH
        if path == LOGIN_PATH:
            return Route(HOME_PATH, "read") if authenticated else Route(LOGIN_PATH, "login")

        route: Optional[Route] = None
        if path in _STATIC_PROTECTED:
            route = Route(path, _STATIC_PROTECTED[path])
        else:
            match = _UPDATE_RE.match(path)
            if match:
                route = Route(path, "update", {"id": int(match.group(1))})

        if route is None:
            return Route(NOT_FOUND_PATH, "not_found", {"requested": path})
        if not authenticated:
            self.storage.set_item(REDIRECT_KEY, route.path)
            return Route(LOGIN_PATH, "login")
        return route

    def navigate(self, path: str) -> Route:
        route = self.resolve(path)
        if route.path != path:
            logger.debug("Navigation to %s resolved to %s", path, route.path)
        self.path = route.path
        return route

    def logout(self) -> Route:
        self.session.logout()
        self.records.records = []
        self.notifications.info("You have been logged out")
        return self.navigate(LOGIN_PATH)

    def close(self) -> None:
        self._unsubscribe()
        self.session.close()
        self.api.close()

    def _on_unauthorized(self, event: UnauthorizedEvent) -> None:
        # start() reports a rejected stored token itself
        if self._checking_auth:
            return
        self.notifications.warning(event.message)
