import uuid
from datetime import datetime

from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field

from app.models.enums import Role


class ProfileRead(SQLModel):
    """
    Response schema returned to clients.

    Also the detached snapshot kept in the profile cache, so cached
    values never depend on a live database session.
    """

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    role: Role
    full_name: str | None = None
    created_at: datetime
    updated_at: datetime


class ProfileUpdate(SQLModel):
    """
    Partial profile update for authenticated users.
    Only `full_name` is editable; role changes go through admins.
    """

    model_config = ConfigDict(extra="forbid")

    full_name: str | None = Field(default=None, max_length=200)

    @field_validator("full_name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("full_name cannot be empty")
        return v


class ProfileRoleUpdate(SQLModel):
    """
    Admin-only role update schema.
    """

    model_config = ConfigDict(extra="forbid")
    role: Role


class AdminPromotion(SQLModel):
    """Admin-only payload: promote the profile registered under `email`."""

    model_config = ConfigDict(extra="forbid")
    email: EmailStr
