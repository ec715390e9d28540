"""
api/routes/profile.py -- "Current user" view over the users collection.

Routes:
  GET /profile  -- {id, name, email, preferences} of the token subject
  PUT /profile  -- partial update of name / preferences / password

The subject is always the user named by the verified token's user_id claim
(resolved by get_current_user). There is no way to read or edit another
user's profile through these routes.

Password change:
  Only attempted when BOTH currentPassword and newPassword are supplied.
  The current password is checked before anything is written, so a wrong
  current password (401 bad_password) leaves name, preferences and the
  stored hash untouched.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import ProfileResponse, ProfileUpdate
from auth.dependencies import get_current_user
from auth.models import DEFAULT_PREFERENCES, User, email_local_part
from auth.store import UserStore
from auth.tokens import hash_password, verify_password

logger = logging.getLogger("recordkeeper.api")

router = APIRouter()


@router.get("/profile", response_model=ProfileResponse)
def get_profile(current_user: User = Depends(get_current_user)) -> ProfileResponse:
    """Return the profile of the authenticated user."""
    return ProfileResponse.from_user(current_user)


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    request: Request,
    body: ProfileUpdate,
    current_user: User = Depends(get_current_user),
) -> ProfileResponse:
    """Apply a partial profile update for the authenticated user."""
    user_store: UserStore = request.app.state.user_store
    updates: dict = {}

    if body.name is not None:
        # Blank name falls back to the email local-part, never to "".
        updates["name"] = body.name or email_local_part(current_user.email)

    if body.preferences is not None:
        updates["preferences"] = {
            **(current_user.preferences or DEFAULT_PREFERENCES),
            **body.preferences.model_dump(exclude_none=True),
        }

    if body.current_password and body.new_password:
        if not verify_password(body.current_password, current_user.hashed_password or ""):
            logger.info("Password change rejected for user_id=%s", current_user.id)
            raise HTTPException(
                status_code=401,
                detail={"code": "bad_password", "message": "Current password is incorrect."},
            )
        updates["hashed_password"] = hash_password(body.new_password)

    if updates:
        user_store.update_user(current_user.id, **updates)
        logger.info("Profile updated for user_id=%s (%s)", current_user.id, ", ".join(sorted(updates)))

    updated = user_store.get_by_id(current_user.id)
    if updated is None:
        raise HTTPException(
            status_code=500,
            detail={"code": "internal_error", "message": "User not found after write."},
        )
    return ProfileResponse.from_user(updated)
