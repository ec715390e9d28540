"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class. Mirrors records/models.py -- dataclasses own domain
shape; stores and routes do the work.

Layer rule: no imports from api/, records/, or client/.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_PREFERENCES: dict = {"theme": "light"}


@dataclass
class User:
    """An account that can log in to the records API.

    email is the login identifier and is unique across users.
    preferences is a free-form bag; today only "theme" is read by the client.
    """

    email: str
    name: str = ""
    id: int | None = None
    hashed_password: str | None = None
    preferences: dict = field(default_factory=lambda: dict(DEFAULT_PREFERENCES))
    created_at: str | None = None

    @property
    def display_name(self) -> str:
        """Return the name, or the email local-part when no name is set."""
        return self.name or email_local_part(self.email)


def email_local_part(email: str) -> str:
    return email.split("@", 1)[0]
