import uuid

from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.profile import ProfileRead


class SignInRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1)


class SignUpRequest(SQLModel):
    """
    Self-service registration.

    New accounts are always customers; see POST /users/promote.
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=6)
    full_name: str | None = Field(default=None, max_length=200)

    @field_validator("full_name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class SignOutRequest(SQLModel):
    """Optional refresh token so the session can be revoked upstream."""

    model_config = ConfigDict(extra="forbid")

    refresh_token: str | None = None


class SessionRead(SQLModel):
    """Snapshot of an auth session after sign-in / sign-up."""

    user_id: uuid.UUID | None
    email: str | None
    access_token: str | None
    refresh_token: str | None
    profile: ProfileRead | None
    is_admin: bool
