import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field

from app.models.enums import Role, enum_column


class UserProfile(SQLModel, table=True):
    """
    Application-level profile for a Supabase principal.

    Identity:
      - id: MUST match Supabase auth.users.id (UUID from JWT "sub").
        Exactly one profile per principal (primary key).

    Role:
      - "customer" | "admin"
      - anonymous visitors have no row.

    Rows are created by the `on_auth_user_created` trigger in Supabase or,
    when the trigger is late, by the self-healing fetch in ProfileService.
    Passwords live in Supabase Auth's own schema, never here.
    """

    __tablename__ = "user_profiles"

    id: uuid.UUID = Field(
        primary_key=True,
        index=True,
        description="Matches Supabase auth.users.id",
    )

    email: str = Field(
        index=True,
        description="Email from Supabase auth.users",
    )

    role: Role = Field(
        default=Role.CUSTOMER,
        sa_column=enum_column(Role, Role.CUSTOMER, "user_role"),
        description="Application role: customer | admin",
    )

    full_name: str | None = Field(
        default=None,
        description="Display name; defaults to signup metadata or email",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last modification timestamp (UTC)",
    )
