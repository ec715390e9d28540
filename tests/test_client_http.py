"""
tests/test_client_http.py -- ApiClient against the real app.

Requests go through TestClientAdapter, so these tests see exactly the
headers the client sends and the responses the API returns.

Coverage:
  - No Authorization header before login; Bearer token on every request after
  - 401 removes the stored token and publishes UnauthorizedEvent(current path)
  - Error messages: server message, "<default>: <status>", unreachable
  - CRUD helpers return parsed JSON; delete handles 204
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from api.seed import SEED_EMAIL, SEED_PASSWORD
from client.events import DEFAULT_UNAUTHORIZED_MESSAGE, UnauthorizedEvent
from client.http import UNREACHABLE_MESSAGE, ApiError, handle_api_error
from client.storage import TOKEN_KEY


def _log_in(app) -> str:
    token = app.api.login(SEED_EMAIL, SEED_PASSWORD)["accessToken"]
    app.storage.set_item(TOKEN_KEY, token)
    return token


class TestAuthorizationHeader:
    def test_no_token_means_no_header(self, client_app) -> None:
        app, adapter = client_app
        with pytest.raises(ApiError):
            app.api.fetch_records()
        assert "Authorization" not in adapter.calls[-1].headers

    def test_token_sent_on_every_request_after_login(self, client_app) -> None:
        app, adapter = client_app
        token = _log_in(app)
        app.api.fetch_records()
        created = app.api.create_record("Header check", "token must be attached")
        app.api.fetch_record(created["id"])
        app.api.fetch_profile()

        after_login = adapter.calls[1:]
        assert len(after_login) == 4
        assert all(c.headers["Authorization"] == f"Bearer {token}" for c in after_login)

    def test_header_stops_after_token_removed(self, client_app) -> None:
        app, adapter = client_app
        _log_in(app)
        app.storage.remove_item(TOKEN_KEY)
        with pytest.raises(ApiError):
            app.api.fetch_profile()
        assert "Authorization" not in adapter.calls[-1].headers


class TestUnauthorizedInterception:
    def test_401_clears_token_and_publishes(self, client_app) -> None:
        app, _adapter = client_app
        app.storage.set_item(TOKEN_KEY, "not-a-real-token")
        app.path = "/profile"
        received: list[UnauthorizedEvent] = []
        app.events.subscribe(received.append)

        with pytest.raises(ApiError) as exc_info:
            app.api.fetch_profile()

        assert exc_info.value.status == 401
        assert app.storage.get_item(TOKEN_KEY) is None
        assert received == [UnauthorizedEvent(path="/profile", message=DEFAULT_UNAUTHORIZED_MESSAGE)]

    def test_other_errors_keep_token(self, client_app) -> None:
        app, _adapter = client_app
        token = _log_in(app)
        with pytest.raises(ApiError) as exc_info:
            app.api.fetch_record(987654)
        assert exc_info.value.status == 404
        assert app.storage.get_item(TOKEN_KEY) == token

    def test_bad_login_is_not_treated_as_expired_session(self, client_app) -> None:
        app, _adapter = client_app
        received: list[UnauthorizedEvent] = []
        app.events.subscribe(received.append)
        with pytest.raises(ApiError) as exc_info:
            app.api.login(SEED_EMAIL, "wrong")
        assert exc_info.value.status == 400
        assert received == []


class TestErrorMessages:
    def test_server_message_is_used(self, client_app) -> None:
        app, _adapter = client_app
        _log_in(app)
        with pytest.raises(ApiError) as exc_info:
            app.api.fetch_record(987654)
        assert exc_info.value.message == "Record 987654 not found."
        assert exc_info.value.code == "not_found"

    def test_default_message_with_status_when_body_is_empty(self, client_app) -> None:
        app, _adapter = client_app
        response = requests.Response()
        response.status_code = 500
        response._content = b""
        app.api.session.request = MagicMock(return_value=response)
        with pytest.raises(ApiError) as exc_info:
            app.api.fetch_records()
        assert exc_info.value.message == "Could not load records: 500"

    def test_unreachable_server(self, offline_app) -> None:
        with pytest.raises(ApiError) as exc_info:
            offline_app.api.fetch_records()
        assert exc_info.value.is_unreachable
        assert exc_info.value.message == UNREACHABLE_MESSAGE

    def test_bad_current_password_message(self, client_app) -> None:
        app, _adapter = client_app
        _log_in(app)
        with pytest.raises(ApiError) as exc_info:
            app.api.update_profile({"currentPassword": "wrong-one", "newPassword": "whatever123"})
        assert exc_info.value.status == 401
        assert exc_info.value.code == "bad_password"
        assert exc_info.value.message.startswith("Current password is incorrect")

    def test_handle_api_error(self) -> None:
        assert handle_api_error(ApiError("boom", status=500)) == "boom"
        assert handle_api_error(ApiError("", status=503), "Save failed") == "Save failed: 503"
        assert handle_api_error(ApiError("ignored")) == UNREACHABLE_MESSAGE
        assert handle_api_error(requests.Timeout()) == UNREACHABLE_MESSAGE
        assert handle_api_error(RuntimeError("x"), "Save failed") == "Save failed"


class TestRecordHelpers:
    def test_create_update_delete(self, client_app) -> None:
        app, adapter = client_app
        _log_in(app)
        created = app.api.create_record("Client made", "created through ApiClient")
        assert isinstance(created["id"], int)

        updated = app.api.update_record(created["id"], "Client edited", "updated through ApiClient")
        assert updated["title"] == "Client edited"

        assert app.api.delete_record(created["id"]) is None
        assert len(adapter.calls_to("DELETE", "/records")) == 1
        with pytest.raises(ApiError):
            app.api.fetch_record(created["id"])
