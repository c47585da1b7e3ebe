import uuid
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Principal:
    """
    An authenticated Supabase identity (auth.users row), as seen by the
    backend. The profile row extends it with a role and display name.
    """

    id: uuid.UUID
    email: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> str | None:
        """Signup metadata full_name, falling back to the email."""
        return self.metadata.get("full_name") or self.email

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "Principal":
        """
        Build from decoded Supabase JWT claims.

        Raises:
            ValueError: if 'sub' is missing or not a UUID.
        """
        sub = claims.get("sub")
        if not sub:
            raise ValueError("token missing sub")
        return cls(
            id=uuid.UUID(str(sub)),
            email=claims.get("email"),
            metadata=dict(claims.get("user_metadata") or {}),
        )

    @classmethod
    def from_auth_user(cls, user: Any) -> "Principal":
        """Build from a supabase-py `User` object."""
        return cls(
            id=uuid.UUID(str(user.id)),
            email=user.email,
            metadata=dict(user.user_metadata or {}),
        )
