"""
API request and response models for the RecordKeeper REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py and
records/models.py, which own the internal domain representation. Route
handlers map between the two.

Wire names follow the browser client's conventions (accessToken,
currentPassword, newPassword); Python attribute names stay snake_case and
the aliases are applied on the way in and out.
"""

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.models import DEFAULT_PREFERENCES, User
from records.models import Record

ThemeName = Literal["light", "dark"]

# bcrypt refuses longer input
PASSWORD_MAX_BYTES = 72


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _check_password_bytes(value: Optional[str]) -> Optional[str]:
    if value is not None and len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"password cannot be longer than {PASSWORD_MAX_BYTES} bytes")
    return value


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)


class EndpointInfo(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    path: str
    method: str
    description: str
    requires_auth: bool = Field(serialization_alias="requiresAuth")
    query_params: Optional[list[str]] = Field(default=None, serialization_alias="queryParams")


class IndexResponse(BaseModel):
    """Response for GET / -- a self-describing map of the API."""

    model_config = ConfigDict(frozen=True)

    message: str = "API server running"
    status: str = "online"
    version: str
    server_time: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        serialization_alias="serverTime",
    )
    endpoints: dict[str, dict[str, EndpointInfo]]


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /login."""

    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value: Any) -> Any:
        return _strip(value)

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, value: str) -> str:
        return _check_password_bytes(value)


class UserResponse(BaseModel):
    """Public view of a user. The password hash never leaves the server."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    preferences: dict[str, Any] = Field(default_factory=lambda: dict(DEFAULT_PREFERENCES))

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        """Factory Method -- the mapping lives with the output model."""
        return cls(
            id=user.id,
            name=user.display_name,
            email=user.email,
            preferences=user.preferences or dict(DEFAULT_PREFERENCES),
        )


class LoginResponse(BaseModel):
    """Response body for POST /login."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    access_token: str = Field(alias="accessToken")
    user: UserResponse


class UserUpdate(BaseModel):
    """Request body for PUT /users/{id}."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


class Preferences(BaseModel):
    """Known preference keys. Unknown keys are kept so the bag can grow."""

    model_config = ConfigDict(extra="allow")

    theme: Optional[ThemeName] = None


class ProfileResponse(UserResponse):
    """Response for GET/PUT /profile -- the token subject's user view."""


class ProfileUpdate(BaseModel):
    """Request body for PUT /profile. Every field is optional.

    The password is only changed when both current_password and new_password
    are present; either one alone is ignored.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, max_length=255)
    preferences: Optional[Preferences] = None
    current_password: Optional[str] = Field(default=None, alias="currentPassword")
    new_password: Optional[str] = Field(default=None, alias="newPassword", min_length=6)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: Any) -> Any:
        """Names are trimmed; passwords are stored exactly as typed."""
        return _strip(value)

    @field_validator("current_password", "new_password")
    @classmethod
    def check_password_bytes(cls, value: Optional[str]) -> Optional[str]:
        return _check_password_bytes(value)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class RecordCreate(BaseModel):
    """Request body for POST /records and PUT /records/{id}."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=5000)


class RecordPatch(BaseModel):
    """Request body for PATCH /records/{id}. Provided fields must be non-empty."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1, max_length=5000)


class RecordResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    description: str

    @classmethod
    def from_record(cls, record: Record) -> "RecordResponse":
        return cls(id=record.id, title=record.title, description=record.description)
