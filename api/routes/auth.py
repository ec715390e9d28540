"""
api/routes/auth.py -- Login endpoint.

Routes:
  POST /login  -- email/password login; returns {accessToken, user}

There is no logout route: tokens are stateless and the client simply drops
its copy. Token revocation is out of scope.

Security:
  POST /login is rate-limited per IP (Settings.login_rate_limit).
  authenticate_user() provides timing equalization -- use it, never inline.
  Cache-Control: no-store on every login response.
  Unknown email and wrong password get the same 400 response, so the
  endpoint does not reveal which emails are registered.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, LoginRequest, LoginResponse, UserResponse
from auth.store import UserStore
from auth.tokens import authenticate_user, create_access_token
from core.config import get_settings

logger = logging.getLogger("recordkeeper.api")

_settings = get_settings()

router = APIRouter()


@limiter.limit(_settings.login_rate_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password and issue a bearer token."""
    user_store: UserStore = request.app.state.user_store
    user = authenticate_user(user_store, body.email, body.password)
    if user is None:
        resp = JSONResponse(
            status_code=400,
            content=ErrorResponse(
                error=ErrorDetail(code="bad_credentials", message="Incorrect email or password.")
            ).model_dump(exclude_none=True),
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    token = create_access_token(user.id, user.email)
    logger.info("User %s logged in", user.id)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(access_token=token, user=UserResponse.from_user(user)).model_dump(by_alias=True),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp
