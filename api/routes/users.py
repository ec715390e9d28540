"""
api/routes/users.py -- Generic item routes for the users collection.

Routes:
  GET /users/{id}  -- public user view (never the password hash)
  PUT /users/{id}  -- update name and/or email

Any authenticated caller may use these routes; there is no per-user
authorization model. Password and preference changes go through PUT /profile.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError

from api.models import UserResponse, UserUpdate
from auth.dependencies import get_current_user
from auth.store import UserStore

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(request: Request, user_id: int) -> UserResponse:
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "User not found."},
        )
    return UserResponse.from_user(user)


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(request: Request, user_id: int, body: UserUpdate) -> UserResponse:
    """Update a user's name or email. A duplicate email is a 409."""
    user_store: UserStore = request.app.state.user_store
    updates = body.model_dump(exclude_none=True)
    if not updates:
        raise HTTPException(
            status_code=400,
            detail={"code": "no_changes", "message": "No fields to update."},
        )
    try:
        updated = user_store.update_user(user_id, **updates)
    except IntegrityError as exc:
        raise HTTPException(
            status_code=409,
            detail={"code": "conflict", "message": "A user with that email already exists."},
        ) from exc
    if not updated:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "User not found."},
        )
    return UserResponse.from_user(user_store.get_by_id(user_id))
