import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Message(SQLModel, table=True):
    """Contact form submission. Anyone may create; only admins read/manage."""

    __tablename__ = "messages"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str
    email: str
    subject: str
    message: str

    is_read: bool = Field(default=False, index=True)
    replied_at: datetime | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
    )
