"""
tests/conftest.py -- Shared test fixtures for RecordKeeper tests.

This module provides:
  - make_test_stores(): isolated in-memory DBs for users + records
  - stores: empty (UserStore, RecordStore) pair for store unit tests
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - backend: one seeded TestClient per test module
  - api_client: (client, token, user_id) for API integration tests
  - TestClientAdapter: a requests transport that forwards to the TestClient,
    so the real client/http.py ApiClient can be exercised end to end
  - client_app: a client App whose HTTP traffic goes through TestClientAdapter

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares
one in-memory instance across all connections in the same process.

DEBUG and LOGIN_RATE_LIMIT must be set before any api/auth module import:
get_settings() is cached on first use and the login limit is read when
api.routes.auth is imported.
"""

from __future__ import annotations

import itertools
import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from urllib.parse import urlsplit

# CRITICAL: set before any core/auth/api import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
import requests
from fastapi.testclient import TestClient
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from api.main import app
from api.seed import SEED_EMAIL, seed_initial_data
from auth.store import UserStore
from auth.tokens import create_access_token
from client.app import App
from client.config import ClientSettings
from client.storage import LocalStorage
from records.store import RecordStore

TEST_BASE_URL = "http://testserver"


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def make_test_stores(db_suffix: str) -> tuple[UserStore, RecordStore]:
    """Create isolated named shared-memory SQLite stores for test isolation.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (e.g. the module name).
    """
    url = f"sqlite:///file:test_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=url), RecordStore(db_url=url)


_store_names = itertools.count()


@pytest.fixture
def stores() -> Generator[tuple[UserStore, RecordStore], None, None]:
    """Empty stores on a database no other test touches."""
    user_store, record_store = make_test_stores(f"unit_{next(_store_names)}")
    yield user_store, record_store
    record_store.close()
    user_store.close()


def _patch_lifespan(user_store: UserStore, record_store: RecordStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.record_store = record_store
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Backend -- one seeded app per test module
# ---------------------------------------------------------------------------


@dataclass
class Backend:
    client: TestClient
    token: str
    user_id: int
    user_store: UserStore
    record_store: RecordStore


@pytest.fixture(scope="module")
def backend(request) -> Generator[Backend, None, None]:
    """Seeded TestClient plus a valid token for the seed user."""
    suffix = request.module.__name__.replace(".", "_")
    user_store, record_store = make_test_stores(suffix)
    seed_initial_data(user_store, record_store)

    uid = user_store.get_by_email(SEED_EMAIL).id
    token = create_access_token(user_id=uid, email=SEED_EMAIL, expire_seconds=3600)

    app.router.lifespan_context = _patch_lifespan(user_store, record_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield Backend(client, token, uid, user_store, record_store)

    record_store.close()
    user_store.close()


@pytest.fixture(scope="module")
def api_client(backend) -> tuple[TestClient, str, int]:
    """Yield (client, token, user_id) for API integration tests."""
    return backend.client, backend.token, backend.user_id


# ---------------------------------------------------------------------------
# Client-side fixtures
# ---------------------------------------------------------------------------


class TestClientAdapter(BaseAdapter):
    """requests transport that hands every request to a FastAPI TestClient.

    Records each PreparedRequest in `calls` so tests can assert on the
    headers the client actually sent and on how many requests went out.
    """

    __test__ = False

    def __init__(self, client: TestClient) -> None:
        super().__init__()
        self.client = client
        self.calls: list[requests.PreparedRequest] = []

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.calls.append(request)
        parts = urlsplit(request.url)
        path = parts.path + (f"?{parts.query}" if parts.query else "")
        headers = {k: v for k, v in request.headers.items() if k.lower() not in ("content-length", "host")}
        resp = self.client.request(request.method, path, headers=headers, content=request.body)

        out = requests.Response()
        out.status_code = resp.status_code
        out.headers = CaseInsensitiveDict(resp.headers)
        out._content = resp.content
        out.encoding = resp.encoding
        out.reason = resp.reason_phrase
        out.url = request.url
        out.request = request
        return out

    def close(self) -> None:
        pass

    def calls_to(self, method: str, path_prefix: str) -> list[requests.PreparedRequest]:
        return [c for c in self.calls if c.method == method and urlsplit(c.url).path.startswith(path_prefix)]


class UnreachableAdapter(BaseAdapter):
    """Transport that fails every request the way a stopped server does."""

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        raise requests.ConnectionError(f"Connection refused: {request.url}")

    def close(self) -> None:
        pass


def client_settings() -> ClientSettings:
    return ClientSettings(api_base_url=TEST_BASE_URL, state_path=None, notification_duration_ms=5000)


@pytest.fixture
def client_app(backend) -> Generator[tuple[App, TestClientAdapter], None, None]:
    """A fresh client App (in-memory storage) wired to the module backend."""
    client_app = App(client_settings(), storage=LocalStorage())
    adapter = TestClientAdapter(backend.client)
    client_app.api.session.mount(TEST_BASE_URL, adapter)
    yield client_app, adapter
    client_app.close()


@pytest.fixture
def offline_app() -> Generator[App, None, None]:
    """A client App whose server can never be reached."""
    offline = App(client_settings(), storage=LocalStorage())
    offline.api.session.mount(TEST_BASE_URL, UnreachableAdapter())
    yield offline
    offline.close()
