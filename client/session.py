"""
client/session.py -- Session Manager: who is logged in, and how that changes.

Owns the authenticated-user state for the client process:

  login(email, password)   POST /login, persist token + user copy, pop the
                           stashed redirect path. Never raises.
  logout()                 clear token + cached user. No network call.
  check_auth()             startup check: stored token -> GET /profile.
  unauthorized handler     subscribed to AuthEvents; a 401 anywhere tears
                           the session down and remembers where the user was.

State is read through properties (is_authenticated, user, error, loading)
so screens and the app shell never touch LocalStorage keys themselves.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional

from client.events import AuthEvents, UnauthorizedEvent
from client.http import ApiClient, ApiError
from client.storage import REDIRECT_KEY, TOKEN_KEY, USER_KEY, LocalStorage

logger = logging.getLogger("recordkeeper.client.session")

LOGIN_PATH = "/login"

_BAD_CREDENTIALS = "Incorrect email or password"
_NOT_AUTHORIZED = "Not authorized. Check your credentials."
_UNREACHABLE = "Could not connect to the server. Make sure it is running."
_LOGIN_FAILED = "Login failed"
_SESSION_EXPIRED = "Session expired. Please log in again."
_PROFILE_FAILED = "Could not load your profile. Please log in again."


@dataclass(frozen=True)
class LoginResult:
    success: bool
    message: Optional[str] = None
    redirect_path: Optional[str] = None


def _login_failure_message(error: ApiError) -> str:
    if error.is_unreachable:
        return _UNREACHABLE
    if error.status == 400:
        return _BAD_CREDENTIALS
    if error.status == 401:
        return _NOT_AUTHORIZED
    return error.message or _LOGIN_FAILED


def _normalize_user(data: dict) -> dict:
    """Copy of a user payload with an id and preferences always present."""
    user = dict(data)
    email = user.get("email") or ""
    if user.get("id") is None:
        user["id"] = email.split("@", 1)[0]
    if not user.get("name"):
        user["name"] = email.split("@", 1)[0]
    user.setdefault("preferences", {"theme": "light"})
    return user


class SessionManager:
    def __init__(self, api: ApiClient, storage: LocalStorage, events: AuthEvents) -> None:
        self.api = api
        self.storage = storage
        self._user: Optional[dict] = None
        self._error: Optional[str] = None
        self._loading = False
        self._unsubscribe = events.subscribe(self._on_unauthorized)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None and self.storage.get_item(TOKEN_KEY) is not None

    @property
    def user(self) -> Optional[dict]:
        return self._user

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def loading(self) -> bool:
        return self._loading

    def set_user(self, data: dict) -> None:
        """Replace the cached user after a successful profile update."""
        self._user = _normalize_user(data)
        self.storage.set_item(USER_KEY, json.dumps(self._user))

    def clear_error(self) -> None:
        self._error = None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> LoginResult:
        self._loading = True
        self._error = None
        try:
            data = self.api.login(email, password)
        except ApiError as e:
            self._error = _login_failure_message(e)
            logger.info("Login failed for %s: %s", email, self._error)
            return LoginResult(success=False, message=self._error)
        except ValueError:
            self._error = _LOGIN_FAILED
            logger.warning("Login response for %s was not valid JSON", email)
            return LoginResult(success=False, message=self._error)
        finally:
            self._loading = False

        token = data.get("accessToken") if isinstance(data, dict) else None
        if not token:
            self._error = _LOGIN_FAILED
            logger.warning("Login response for %s carried no token", email)
            return LoginResult(success=False, message=self._error)

        self.storage.set_item(TOKEN_KEY, token)
        self.set_user(data.get("user") or {"email": email})

        redirect_path = self.storage.get_item(REDIRECT_KEY)
        self.storage.remove_item(REDIRECT_KEY)
        logger.info("Logged in as %s", self._user["email"])
        return LoginResult(success=True, redirect_path=redirect_path)

    def logout(self) -> None:
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_KEY)
        self._user = None
        self._error = None
        logger.info("Logged out")

    def check_auth(self) -> bool:
        """Validate a stored token against GET /profile. Returns is_authenticated."""
        if self.storage.get_item(TOKEN_KEY) is None:
            self._user = None
            return False

        self._loading = True
        try:
            profile = self.api.fetch_profile()
        except ApiError as e:
            self.storage.remove_item(TOKEN_KEY)
            self.storage.remove_item(USER_KEY)
            self._user = None
            self._error = _SESSION_EXPIRED if e.status == 401 else _PROFILE_FAILED
            logger.info("Stored session rejected: %s", e.message)
            return False
        finally:
            self._loading = False

        self.set_user(profile)
        return True

    def close(self) -> None:
        self._unsubscribe()

    # ------------------------------------------------------------------
    # Unauthorized signal
    # ------------------------------------------------------------------

    def _on_unauthorized(self, event: UnauthorizedEvent) -> None:
        self._user = None
        self.storage.remove_item(USER_KEY)
        if event.path and event.path != LOGIN_PATH:
            self.storage.set_item(REDIRECT_KEY, event.path)
        self._error = event.message
