"""
client/http.py -- Thin HTTP wrapper around the RecordKeeper API.

Centralizes request configuration (base URL, timeout, JSON content type)
and two cross-cutting behaviours:

  Request interception: StoredTokenAuth reads the token from LocalStorage at
      send time and adds `Authorization: Bearer <token>`. No token -> the
      request goes out unauthenticated.

  Response interception: a session response hook. On any 401 it removes the
      stored token and publishes an UnauthorizedEvent carrying the current
      path. It never navigates; that is the session's and the app's job.

Every API failure is turned into ApiError with a message fit for display:
  server sent a message     -> that message
  server sent no message    -> "<default>: <status>"
  no response at all        -> "Could not connect to the server"

Module-level requests.Session per ApiClient gives connection pooling across
calls, the same way the server-side fetchers share one session.
"""

import logging
from typing import Any, Callable, Optional

import requests
from requests.auth import AuthBase

from client.events import AuthEvents, UnauthorizedEvent
from client.storage import TOKEN_KEY, LocalStorage

logger = logging.getLogger("recordkeeper.client.http")

UNREACHABLE_MESSAGE = "Could not connect to the server"


class ApiError(Exception):
    """An API call failed. status is None when no response was received."""

    def __init__(self, message: str, status: Optional[int] = None, payload: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload

    @property
    def is_unreachable(self) -> bool:
        return self.status is None

    @property
    def code(self) -> Optional[str]:
        """The server's machine-readable error code, if it sent one."""
        if isinstance(self.payload, dict) and isinstance(self.payload.get("error"), dict):
            return self.payload["error"].get("code")
        return None


class StoredTokenAuth(AuthBase):
    """Attach the stored bearer token, looked up fresh for every request."""

    def __init__(self, storage: LocalStorage) -> None:
        self.storage = storage

    def __call__(self, r: requests.PreparedRequest) -> requests.PreparedRequest:
        token = self.storage.get_item(TOKEN_KEY)
        if token:
            r.headers["Authorization"] = f"Bearer {token}"
        return r


def handle_api_error(error: Exception, default_message: str = "Request failed") -> str:
    """Turn any exception from an API call into a message fit for display."""
    if isinstance(error, ApiError):
        if error.is_unreachable:
            return UNREACHABLE_MESSAGE
        return error.message or f"{default_message}: {error.status}"
    if isinstance(error, requests.RequestException):
        return UNREACHABLE_MESSAGE
    return default_message


def _json_or_none(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return None


def _server_message(payload: Any) -> Optional[str]:
    """Pull a human-readable message out of an error body, if it has one."""
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    if payload.get("message"):
        return str(payload["message"])
    return None


class ApiClient:
    def __init__(
        self,
        storage: LocalStorage,
        events: AuthEvents,
        base_url: str = "http://localhost:3001",
        timeout: float = 10.0,
        current_path: Callable[[], str] = lambda: "/",
    ) -> None:
        self.storage = storage
        self.events = events
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.current_path = current_path
        self.session = requests.Session()
        self.session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})
        self.session.auth = StoredTokenAuth(storage)
        self.session.hooks["response"].append(self._on_response)

    # ------------------------------------------------------------------
    # Interceptors
    # ------------------------------------------------------------------

    def _on_response(self, response: requests.Response, *args, **kwargs) -> None:
        if response.status_code != 401:
            return
        self.storage.remove_item(TOKEN_KEY)
        logger.info("Token rejected by the server and removed from storage")
        self.events.publish(UnauthorizedEvent(path=self.current_path()))

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(self, method: str, path: str, default_message: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("[API Error] %s (%s %s: %s)", UNREACHABLE_MESSAGE, method, path, e)
            raise ApiError(UNREACHABLE_MESSAGE) from e
        if not resp.ok:
            payload = _json_or_none(resp)
            message = _server_message(payload) or f"{default_message}: {resp.status_code}"
            logger.warning("[API Error] %s", message)
            raise ApiError(message, status=resp.status_code, payload=payload)
        return resp

    def close(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------
    # Auth and profile
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> dict:
        """POST /login. Returns {"accessToken": ..., "user": {...}}."""
        resp = self._request("POST", "/login", "Authentication failed", json={"email": email, "password": password})
        return resp.json()

    def fetch_profile(self) -> dict:
        return self._request("GET", "/profile", "Could not load the profile").json()

    def update_profile(self, changes: dict) -> dict:
        """PUT /profile with any of name, preferences, currentPassword/newPassword."""
        return self._request("PUT", "/profile", "Could not update the profile", json=changes).json()

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def fetch_records(self) -> list[dict]:
        return self._request("GET", "/records", "Could not load records").json()

    def fetch_record(self, record_id: int) -> dict:
        return self._request("GET", f"/records/{record_id}", "Could not load the record").json()

    def create_record(self, title: str, description: str) -> dict:
        payload = {"title": title, "description": description}
        return self._request("POST", "/records", "Could not create the record", json=payload).json()

    def update_record(self, record_id: int, title: str, description: str) -> dict:
        payload = {"title": title, "description": description}
        return self._request("PUT", f"/records/{record_id}", "Could not update the record", json=payload).json()

    def delete_record(self, record_id: int) -> None:
        self._request("DELETE", f"/records/{record_id}", "Could not delete the record")
