"""
api/seed.py -- Initial data for an empty store.

The API is a development mock: a fresh database gets one login and a handful
of records so the client has something to show. Seeding only happens when
the users table is empty, so restarting the server never duplicates data
and never resets edits.

Default login:  nuevo@test.com / password123
"""

import logging

from auth.models import User
from auth.store import UserStore
from auth.tokens import hash_password
from records.models import Record
from records.store import RecordStore

logger = logging.getLogger("recordkeeper.api")

SEED_EMAIL = "nuevo@test.com"
SEED_PASSWORD = "password123"  # nosec B105 -- documented development login

SEED_RECORDS: list[tuple[str, str]] = [
    (
        "Getting started",
        "Records are simple title and description pairs. Create, edit and delete them from the list screen.",
    ),
    (
        "Bearer tokens",
        "Every request after login carries the token in the Authorization header until you log out.",
    ),
    (
        "Filtering",
        "The list screen filters by substring over title and description after fetching every record.",
    ),
    (
        "Profiles",
        "The profile screen edits your display name, theme preference and password.",
    ),
    (
        "Mock API",
        "The API is a SQLite-backed development server. Concurrent writes are last-write-wins.",
    ),
]


def seed_initial_data(user_store: UserStore, record_store: RecordStore) -> bool:
    """Populate an empty store. Returns True if anything was written."""
    if user_store.has_users():
        return False

    user_id = user_store.create_user(
        User(
            email=SEED_EMAIL,
            name="Nuevo Usuario",
            hashed_password=hash_password(SEED_PASSWORD),
            preferences={"theme": "light"},
        )
    )
    logger.info("Seeded user %s (id=%s)", SEED_EMAIL, user_id)

    if record_store.count_records() == 0:
        for title, description in SEED_RECORDS:
            record_store.create_record(Record(title=title, description=description))
        logger.info("Seeded %d records", len(SEED_RECORDS))
    return True
