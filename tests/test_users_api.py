"""
tests/test_users_api.py -- Integration tests for GET/PUT /users/{id}.
"""

from __future__ import annotations

from auth.models import User


def _headers(backend) -> dict:
    return {"Authorization": f"Bearer {backend.token}"}


def test_get_user_hides_password_hash(backend) -> None:
    resp = backend.client.get(f"/users/{backend.user_id}", headers=_headers(backend))
    assert resp.status_code == 200
    data = resp.json()
    assert set(data) == {"id", "name", "email", "preferences"}


def test_get_unknown_user(backend) -> None:
    resp = backend.client.get("/users/424242", headers=_headers(backend))
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "not_found"


def test_users_require_auth(backend) -> None:
    assert backend.client.get(f"/users/{backend.user_id}").status_code == 401


def test_update_name_and_email(backend) -> None:
    uid = backend.user_store.create_user(User(email="before@test.com", name="Before"))
    resp = backend.client.put(
        f"/users/{uid}",
        json={"name": "After", "email": "After@Test.com"},
        headers=_headers(backend),
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "After"
    assert resp.json()["email"] == "after@test.com"


def test_duplicate_email_is_conflict(backend) -> None:
    uid = backend.user_store.create_user(User(email="dupe-source@test.com"))
    backend.user_store.create_user(User(email="taken@test.com"))
    resp = backend.client.put(f"/users/{uid}", json={"email": "taken@test.com"}, headers=_headers(backend))
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "conflict"


def test_empty_update_is_rejected(backend) -> None:
    resp = backend.client.put(f"/users/{backend.user_id}", json={}, headers=_headers(backend))
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "no_changes"


def test_update_unknown_user(backend) -> None:
    resp = backend.client.put("/users/424242", json={"name": "Nobody"}, headers=_headers(backend))
    assert resp.status_code == 404
