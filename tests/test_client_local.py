"""
tests/test_client_local.py -- Client pieces that never touch the network:
storage, events, notifications, theme, validation and rendering.
"""

from __future__ import annotations

import json

import pytest

from client import render
from client.events import AuthEvents, UnauthorizedEvent
from client.notifications import NotificationService
from client.storage import THEME_KEY, TOKEN_KEY, LocalStorage
from client.theme import DARK_PALETTE, LIGHT_PALETTE, ThemeManager
from client.validation import validate_login, validate_profile, validate_record


class TestLocalStorage:
    def test_persists_between_instances(self, tmp_path) -> None:
        path = tmp_path / "state.json"
        LocalStorage(path).set_item(TOKEN_KEY, "abc")
        assert LocalStorage(path).get_item(TOKEN_KEY) == "abc"

    def test_remove_and_clear(self, tmp_path) -> None:
        path = tmp_path / "state.json"
        storage = LocalStorage(path)
        storage.set_item("a", "1")
        storage.set_item("b", "2")
        storage.remove_item("a")
        assert json.loads(path.read_text()) == {"b": "2"}
        storage.clear()
        assert LocalStorage(path).get_item("b") is None

    def test_corrupt_file_is_treated_as_empty(self, tmp_path) -> None:
        path = tmp_path / "state.json"
        path.write_text("{not json")
        storage = LocalStorage(path)
        assert storage.get_item(TOKEN_KEY) is None
        storage.set_item(TOKEN_KEY, "fresh")
        assert LocalStorage(path).get_item(TOKEN_KEY) == "fresh"

    def test_memory_only(self) -> None:
        storage = LocalStorage()
        storage.set_item("k", "v")
        assert "k" in storage
        assert storage.path is None


class TestAuthEvents:
    def test_publish_in_order_and_unsubscribe(self) -> None:
        events = AuthEvents()
        seen: list[str] = []
        events.subscribe(lambda e: seen.append(f"first:{e.path}"))
        unsubscribe = events.subscribe(lambda e: seen.append(f"second:{e.path}"))
        events.publish(UnauthorizedEvent(path="/read"))
        unsubscribe()
        events.publish(UnauthorizedEvent(path="/create"))
        assert seen == ["first:/read", "second:/read", "first:/create"]


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class TestNotifications:
    def test_expire_after_duration(self) -> None:
        clock = FakeClock()
        service = NotificationService(clock=clock)
        service.success("saved")
        clock.now += 4.9
        assert len(service.active()) == 1
        clock.now += 0.2
        assert service.active() == []

    def test_zero_duration_persists(self) -> None:
        clock = FakeClock()
        service = NotificationService(clock=clock)
        note_id = service.error("sticky", title="Heads up", duration_ms=0)
        clock.now += 3600
        assert [n.id for n in service.active()] == [note_id]
        service.dismiss(note_id)
        assert service.active() == []

    def test_sink_receives_each_notification(self) -> None:
        received = []
        service = NotificationService(sink=received.append)
        service.info("one")
        service.warning("two")
        assert [(n.kind, n.message) for n in received] == [("info", "one"), ("warning", "two")]

    def test_ids_are_unique_and_clear_empties(self) -> None:
        service = NotificationService()
        ids = {service.info(str(i)) for i in range(5)}
        assert len(ids) == 5
        service.clear()
        assert service.active() == []

    def test_unknown_kind(self) -> None:
        with pytest.raises(ValueError):
            NotificationService().notify("shout", "hi")


class TestTheme:
    def test_default_light_and_toggle_persists(self) -> None:
        storage = LocalStorage()
        theme = ThemeManager(storage)
        assert theme.mode == "light"
        assert theme.palette is LIGHT_PALETTE
        assert theme.toggle() == "dark"
        assert storage.get_item(THEME_KEY) == "dark"
        assert ThemeManager(storage).palette is DARK_PALETTE

    def test_invalid_saved_value_falls_back(self) -> None:
        storage = LocalStorage()
        storage.set_item(THEME_KEY, "neon")
        assert ThemeManager(storage).mode == "light"

    def test_set_mode_rejects_unknown(self) -> None:
        with pytest.raises(ValueError):
            ThemeManager(LocalStorage()).set_mode("neon")


class TestValidation:
    def test_record(self) -> None:
        assert validate_record("Good title", "A long enough description") == {}
        assert validate_record("   ", "   ") == {
            "title": "Title is required",
            "description": "Description is required",
        }

    def test_login(self) -> None:
        assert validate_login("a@b.co", "x") == {}
        assert set(validate_login("not-an-email", "")) == {"email", "password"}

    def test_profile_password_rules(self) -> None:
        assert validate_profile("Name") == {}
        assert set(validate_profile("Name", "", "abc", "abc")) == {"current_password", "new_password"}
        assert validate_profile("Name", "old", "abcdef", "abcdef") == {}
        assert set(validate_profile("Name", "old", "x" * 73, "x" * 73)) == {"new_password"}
        assert validate_profile("Name", "old", "  a   ", "  a   ") == {}
        assert "name" in validate_profile("  ")


class TestRender:
    @pytest.fixture(autouse=True)
    def no_color(self):
        render.disable_color()
        yield
        render._color_enabled = None

    @pytest.mark.parametrize(("hour", "text"), [(0, "Good morning"), (11, "Good morning"), (12, "Good afternoon"), (18, "Good evening")])
    def test_greeting(self, hour, text) -> None:
        assert render.greeting(hour) == text

    def test_header_greets_by_name(self) -> None:
        out = render.render_header({"name": "", "email": "ana@test.com"}, LIGHT_PALETTE, hour=9)
        assert "Good morning, ana" in out
        assert "\033[" not in out

    def test_records_table(self) -> None:
        out = render.render_records([{"id": 1, "title": "First", "description": "desc"}], LIGHT_PALETTE)
        assert "RECORDS (1)" in out
        assert "First" in out
        assert "No records found." in render.render_records([], LIGHT_PALETTE)

    def test_no_color_env(self, monkeypatch) -> None:
        render._color_enabled = None
        monkeypatch.setenv("NO_COLOR", "1")
        assert "\033[" not in render.render_records([], DARK_PALETTE)

    def test_strip_ansi(self) -> None:
        assert render.strip_ansi("\033[91mred\033[0m") == "red"
