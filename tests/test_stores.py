"""
tests/test_stores.py -- Unit tests for RecordStore, UserStore and seeding.

Each test gets its own named in-memory database so state never leaks
between tests.
"""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from api.seed import SEED_EMAIL, SEED_PASSWORD, SEED_RECORDS, seed_initial_data
from auth.models import DEFAULT_PREFERENCES, User
from auth.tokens import verify_password
from records.models import Record


class TestRecordStore:
    def test_create_and_get(self, stores) -> None:
        _users, records = stores
        rid = records.create_record(Record(title="Alpha", description="first letter"))
        record = records.get_record(rid)
        assert record.id == rid
        assert record.title == "Alpha"
        assert record.created_at == record.updated_at

    def test_get_missing_returns_none(self, stores) -> None:
        _users, records = stores
        assert records.get_record(1) is None

    def test_patch_updates_timestamp_and_field(self, stores) -> None:
        _users, records = stores
        rid = records.create_record(Record(title="Old", description="kept"))
        assert records.patch_record(rid, title="New") is True
        record = records.get_record(rid)
        assert record.title == "New"
        assert record.description == "kept"

    def test_patch_rejects_unknown_fields(self, stores) -> None:
        _users, records = stores
        rid = records.create_record(Record(title="x", description="y"))
        with pytest.raises(ValueError):
            records.patch_record(rid, owner="someone")

    def test_replace_and_delete_missing(self, stores) -> None:
        _users, records = stores
        assert records.replace_record(99, "t", "d") is False
        assert records.delete_record(99) is False

    def test_delete_removes_only_that_record(self, stores) -> None:
        _users, records = stores
        keep = records.create_record(Record(title="keep", description="stays"))
        drop = records.create_record(Record(title="drop", description="goes"))
        assert records.delete_record(drop) is True
        remaining, total = records.list_records()
        assert [r.id for r in remaining] == [keep]
        assert total == 1

    def test_list_filter_sort_and_page(self, stores) -> None:
        _users, records = stores
        for title in ("banana", "apple", "cherry", "apple pie"):
            records.create_record(Record(title=title, description=f"about {title}"))

        matched, total = records.list_records(q="APPLE")
        assert {r.title for r in matched} == {"apple", "apple pie"}
        assert total == 2

        by_title, _ = records.list_records(sort="title", order="desc")
        assert [r.title for r in by_title] == ["cherry", "banana", "apple pie", "apple"]

        page2, total = records.list_records(sort="title", page=2, limit=3)
        assert [r.title for r in page2] == ["cherry"]
        assert total == 4

    def test_unknown_sort_falls_back_to_id(self, stores) -> None:
        _users, records = stores
        ids = [records.create_record(Record(title=t, description="d")) for t in ("b", "a")]
        listed, _ = records.list_records(sort="created_at; DROP TABLE records")
        assert [r.id for r in listed] == ids

    def test_ping(self, stores) -> None:
        _users, records = stores
        assert records.ping() is True


class TestUserStore:
    def test_create_lowercases_email(self, stores) -> None:
        users, _records = stores
        uid = users.create_user(User(email="Mixed@Case.COM", name="M"))
        assert users.get_by_id(uid).email == "mixed@case.com"
        assert users.get_by_email("MIXED@case.com").id == uid

    def test_duplicate_email_raises(self, stores) -> None:
        users, _records = stores
        users.create_user(User(email="one@test.com"))
        with pytest.raises(IntegrityError):
            users.create_user(User(email="ONE@test.com"))

    def test_default_preferences(self, stores) -> None:
        users, _records = stores
        uid = users.create_user(User(email="prefs@test.com"))
        assert users.get_by_id(uid).preferences == DEFAULT_PREFERENCES

    def test_update_serializes_preferences(self, stores) -> None:
        users, _records = stores
        uid = users.create_user(User(email="dark@test.com"))
        assert users.update_user(uid, preferences={"theme": "dark"}) is True
        assert users.get_by_id(uid).preferences == {"theme": "dark"}

    def test_update_missing_user(self, stores) -> None:
        users, _records = stores
        assert users.update_user(404, name="ghost") is False

    def test_display_name_falls_back_to_local_part(self, stores) -> None:
        users, _records = stores
        uid = users.create_user(User(email="jane.doe@test.com"))
        assert users.get_by_id(uid).display_name == "jane.doe"

    def test_list_users_ordered_by_id(self, stores) -> None:
        users, _records = stores
        first = users.create_user(User(email="a@test.com"))
        second = users.create_user(User(email="b@test.com"))
        assert [u.id for u in users.list_users()] == [first, second]


class TestSeed:
    def test_seed_populates_empty_store_once(self, stores) -> None:
        users, records = stores
        assert seed_initial_data(users, records) is True
        assert seed_initial_data(users, records) is False
        assert records.count_records() == len(SEED_RECORDS)
        assert len(users.list_users()) == 1

    def test_seed_user_password_is_hashed(self, stores) -> None:
        users, records = stores
        seed_initial_data(users, records)
        user = users.get_by_email(SEED_EMAIL)
        assert user.hashed_password != SEED_PASSWORD
        assert verify_password(SEED_PASSWORD, user.hashed_password)
        assert user.preferences == {"theme": "light"}
