import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field

ReadFilter = Literal["all", "read", "unread"]


class MessageCreate(SQLModel):
    """Public contact form payload."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=200)
    email: EmailStr
    subject: str = Field(max_length=300)
    message: str

    @field_validator("name", "subject", "message")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class MessageRead(SQLModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    subject: str
    message: str
    is_read: bool
    replied_at: datetime | None
    created_at: datetime


class MessageUpdate(SQLModel):
    """
    Admin payload.

    - is_read: mark read / unread
    - replied: True stamps replied_at (and marks read), False clears it
    """

    model_config = ConfigDict(extra="forbid")

    is_read: bool | None = None
    replied: bool | None = None
