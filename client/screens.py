"""
client/screens.py -- Screen controllers for the terminal client.

A screen holds the state one view needs (records, form fields, profile) and
exposes the actions a user can take on it. Screens never print: render.py
and main.py read their state and draw it. Every screen has:

  loading   True while a request is in flight; a second submit is refused
  errors    field name -> validation message from the last submit
  message   inline status line (API failure, "Record not found", ...)

No ApiError escapes a screen. Failures are turned into `message` plus an
error notification; local state is only changed after a call succeeds.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from client.http import ApiClient, ApiError, handle_api_error
from client.notifications import NotificationService
from client.session import SessionManager
from client.theme import MODES, ThemeManager
from client.validation import validate_login, validate_profile, validate_record

logger = logging.getLogger("recordkeeper.client.screens")

HOME_PATH = "/read"


class Screen:
    def __init__(self, notifications: NotificationService) -> None:
        self.notifications = notifications
        self.loading = False
        self.errors: dict[str, str] = {}
        self.message: Optional[str] = None

    def _begin(self) -> bool:
        """Enter the loading state. False when a request is already running."""
        if self.loading:
            logger.debug("%s: ignoring submit while a request is in flight", type(self).__name__)
            return False
        self.loading = True
        self.errors = {}
        self.message = None
        return True

    def _fail(self, error: ApiError, default_message: str) -> None:
        self.message = handle_api_error(error, default_message)
        self.notifications.error(self.message)


class LoginScreen(Screen):
    def __init__(self, session: SessionManager, notifications: NotificationService) -> None:
        super().__init__(notifications)
        self.session = session

    def submit(self, email: str, password: str) -> Optional[str]:
        """Log in. Returns the path to go to next, or None if login failed."""
        if not self._begin():
            return None
        try:
            self.errors = validate_login(email, password)
            if self.errors:
                return None
            result = self.session.login(email.strip(), password)
        finally:
            self.loading = False

        if not result.success:
            self.message = result.message
            self.notifications.error(result.message or "Login failed")
            return None

        user = self.session.user or {}
        self.notifications.success(f"Welcome, {user.get('name') or email}")
        return result.redirect_path or HOME_PATH


class RecordListScreen(Screen):
    def __init__(self, api: ApiClient, notifications: NotificationService) -> None:
        super().__init__(notifications)
        self.api = api
        self.records: list[dict] = []

    def load(self) -> bool:
        if not self._begin():
            return False
        try:
            self.records = self.api.fetch_records()
        except ApiError as e:
            self._fail(e, "Could not load records")
            return False
        finally:
            self.loading = False
        return True

    def visible(self, query: str = "") -> list[dict]:
        """Records whose title or description contains query, ignoring case."""
        needle = (query or "").strip().lower()
        if not needle:
            return list(self.records)
        return [
            r
            for r in self.records
            if needle in str(r.get("title", "")).lower() or needle in str(r.get("description", "")).lower()
        ]

    def find(self, record_id: int) -> Optional[dict]:
        return next((r for r in self.records if r.get("id") == record_id), None)

    def upsert(self, record: dict) -> None:
        """Put a saved record into the list, replacing any copy with the same id."""
        for i, existing in enumerate(self.records):
            if existing.get("id") == record.get("id"):
                self.records[i] = record
                return
        self.records.append(record)

    def delete(self, record_id: int, confirm: Callable[[dict], bool]) -> bool:
        """Ask confirm(record) and, if it agrees, delete that one record."""
        self.message = None
        record = self.find(record_id)
        if record is None:
            self.message = "Record not found"
            return False
        if not confirm(record):
            return False
        if not self._begin():
            return False
        try:
            self.api.delete_record(record_id)
        except ApiError as e:
            self._fail(e, "Could not delete the record")
            return False
        finally:
            self.loading = False

        self.records = [r for r in self.records if r.get("id") != record_id]
        self.notifications.success(f"Deleted \"{record.get('title', record_id)}\"")
        return True


class RecordFormScreen(Screen):
    """Create a record (record_id=None) or edit an existing one."""

    def __init__(
        self,
        api: ApiClient,
        notifications: NotificationService,
        record_id: Optional[int] = None,
        on_saved: Optional[Callable[[dict], None]] = None,
    ) -> None:
        super().__init__(notifications)
        self.api = api
        self.record_id = record_id
        self.on_saved = on_saved
        self.title = ""
        self.description = ""

    @property
    def is_edit(self) -> bool:
        return self.record_id is not None

    def load(self) -> bool:
        if not self.is_edit:
            return True
        if not self._begin():
            return False
        try:
            record = self.api.fetch_record(self.record_id)
        except ApiError as e:
            if e.status == 404:
                self.message = "Record not found"
            else:
                self._fail(e, "Could not load the record")
            return False
        finally:
            self.loading = False
        self.title = record.get("title", "")
        self.description = record.get("description", "")
        return True

    def submit(self, title: str, description: str) -> Optional[dict]:
        """Validate then save. Returns the saved record, or None."""
        if not self._begin():
            return None
        self.title, self.description = title, description
        try:
            self.errors = validate_record(title, description)
            if self.errors:
                return None
            if self.is_edit:
                saved = self.api.update_record(self.record_id, title.strip(), description.strip())
            else:
                saved = self.api.create_record(title.strip(), description.strip())
        except ApiError as e:
            if e.status == 404:
                self.message = "Record not found"
                self.notifications.error(self.message)
            else:
                self._fail(e, "Could not save the record")
            return None
        finally:
            self.loading = False

        if self.on_saved is not None:
            self.on_saved(saved)
        self.notifications.success("Record updated" if self.is_edit else "Record created")
        return saved


class ProfileScreen(Screen):
    def __init__(
        self,
        api: ApiClient,
        session: SessionManager,
        theme: ThemeManager,
        notifications: NotificationService,
    ) -> None:
        super().__init__(notifications)
        self.api = api
        self.session = session
        self.theme = theme
        self.profile: Optional[dict] = None

    def load(self) -> bool:
        if not self._begin():
            return False
        try:
            self.profile = self.api.fetch_profile()
        except ApiError as e:
            self._fail(e, "Could not load the profile")
            return False
        finally:
            self.loading = False

        saved_theme = (self.profile.get("preferences") or {}).get("theme")
        if saved_theme in MODES and saved_theme != self.theme.mode:
            self.theme.set_mode(saved_theme)
        return True

    def submit(
        self,
        name: str,
        theme: Optional[str] = None,
        current_password: str = "",
        new_password: str = "",
        confirm_password: str = "",
    ) -> bool:
        if not self._begin():
            return False
        try:
            self.errors = validate_profile(name, current_password, new_password, confirm_password)
            if theme is not None and theme not in MODES:
                self.errors["theme"] = f"Theme must be one of {', '.join(MODES)}"
            if self.errors:
                return False

            changes: dict = {"name": name.strip()}
            if theme is not None:
                changes["preferences"] = {"theme": theme}
            if new_password:
                changes["currentPassword"] = current_password
                changes["newPassword"] = new_password
            updated = self.api.update_profile(changes)
        except ApiError as e:
            if e.code == "bad_password":
                self.message = "Current password is incorrect"
                self.notifications.error(self.message)
            else:
                self._fail(e, "Could not update the profile")
            return False
        finally:
            self.loading = False

        self.profile = updated
        self.session.set_user(updated)
        new_theme = (updated.get("preferences") or {}).get("theme")
        if new_theme in MODES:
            self.theme.set_mode(new_theme)
        self.notifications.success("Password changed" if new_password else "Profile updated")
        return True
