"""
client/validation.py -- Form checks run before any request is sent.

Each validator returns a dict of field name -> message. An empty dict means
the form may be submitted. Text fields are checked after stripping
whitespace; passwords are checked exactly as typed.
"""

import re

TITLE_MIN_LENGTH = 3
DESCRIPTION_MIN_LENGTH = 10
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_BYTES = 72

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_record(title: str, description: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    title = (title or "").strip()
    description = (description or "").strip()

    if not title:
        errors["title"] = "Title is required"
    elif len(title) < TITLE_MIN_LENGTH:
        errors["title"] = f"Title must be at least {TITLE_MIN_LENGTH} characters"

    if not description:
        errors["description"] = "Description is required"
    elif len(description) < DESCRIPTION_MIN_LENGTH:
        errors["description"] = f"Description must be at least {DESCRIPTION_MIN_LENGTH} characters"

    return errors


def validate_login(email: str, password: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    email = (email or "").strip()

    if not email:
        errors["email"] = "Email is required"
    elif not _EMAIL_RE.match(email):
        errors["email"] = "Enter a valid email address"

    if not password:
        errors["password"] = "Password is required"

    return errors


def validate_profile(
    name: str,
    current_password: str = "",
    new_password: str = "",
    confirm_password: str = "",
) -> dict[str, str]:
    """Name is required. The password fields only matter when changing it."""
    errors: dict[str, str] = {}

    if not (name or "").strip():
        errors["name"] = "Name is required"

    if new_password or confirm_password or current_password:
        if not current_password:
            errors["current_password"] = "Current password is required to set a new one"
        if not new_password:
            errors["new_password"] = "New password is required"
        elif len(new_password) < PASSWORD_MIN_LENGTH:
            errors["new_password"] = f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
        elif len(new_password.encode("utf-8")) > PASSWORD_MAX_BYTES:
            errors["new_password"] = f"Password must be at most {PASSWORD_MAX_BYTES} bytes"
        if new_password != confirm_password:
            errors["confirm_password"] = "Passwords do not match"

    return errors
