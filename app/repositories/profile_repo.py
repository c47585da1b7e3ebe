import uuid
from datetime import datetime, timezone

from sqlalchemy import func, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import Session, select

from app.core.policies import Viewer, check_profile_write, profile_read_filter
from app.models.enums import Role
from app.models.profile import UserProfile


def _insert_for(session: Session):
    """Dialect-specific INSERT supporting ON CONFLICT."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise RuntimeError(f"Upsert is not supported on dialect {dialect!r}")


class ProfileRepository:
    """
    Data access layer for user_profiles.

    Responsibilities:
      - Pure DB operations (CRUD + queries) under the row-level policies
      - No FastAPI, no HTTP, no caching

    Methods prefixed with `elevated_` bypass the policies, like a
    SECURITY DEFINER procedure in the database. Callers must authorize
    first.
    """

    def get_by_id(
        self,
        session: Session,
        viewer_id: Viewer,
        profile_id: uuid.UUID,
    ) -> UserProfile | None:
        """Return the profile, or None if missing or not visible to the viewer."""
        stmt = select(UserProfile).where(
            UserProfile.id == profile_id,
            profile_read_filter(viewer_id),
        )
        return session.exec(stmt).first()

    def list_visible(
        self,
        session: Session,
        viewer_id: Viewer,
        skip: int = 0,
        limit: int = 50,
    ) -> list[UserProfile]:
        """Profiles visible to the viewer (all of them for admins)."""
        stmt = (
            select(UserProfile)
            .where(profile_read_filter(viewer_id))
            .order_by(UserProfile.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return session.exec(stmt).all()

    def upsert_default(
        self,
        session: Session,
        viewer_id: Viewer,
        profile_id: uuid.UUID,
        email: str,
        full_name: str | None,
    ) -> UserProfile:
        """
        Insert a customer profile, or merge email/full_name into the row a
        concurrent writer (e.g. the signup trigger) already created.

        Role is never touched on conflict, so an existing admin stays admin.
        """
        check_profile_write(viewer_id, profile_id, "insert")

        now = datetime.now(timezone.utc)
        insert = _insert_for(session)
        stmt = insert(UserProfile).values(
            id=profile_id,
            email=email,
            full_name=full_name,
            role=Role.CUSTOMER,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserProfile.id],
            set_={
                "email": stmt.excluded.email,
                "full_name": stmt.excluded.full_name,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        session.exec(stmt)
        session.commit()

        profile = session.get(UserProfile, profile_id)
        session.refresh(profile)
        return profile

    def update(
        self,
        session: Session,
        viewer_id: Viewer,
        profile: UserProfile,
    ) -> UserProfile:
        """Persist changes to the viewer's own profile."""
        check_profile_write(viewer_id, profile.id, "update")
        profile.updated_at = datetime.now(timezone.utc)
        session.add(profile)
        session.commit()
        session.refresh(profile)
        return profile

    # ----- Elevated operations -----

    def elevated_set_role(
        self,
        session: Session,
        profile_id: uuid.UUID,
        role: Role,
    ) -> UserProfile | None:
        profile = session.get(UserProfile, profile_id)
        if profile is None:
            return None
        profile.role = role
        profile.updated_at = datetime.now(timezone.utc)
        session.add(profile)
        session.commit()
        session.refresh(profile)
        return profile

    def elevated_set_role_by_email(
        self,
        session: Session,
        email: str,
        role: Role,
    ) -> list[uuid.UUID]:
        """
        Equivalent of the `create_admin_user(email)` procedure.

        Returns:
            ids of the profiles that were changed.
        """
        stmt = (
            update(UserProfile)
            .where(func.lower(UserProfile.email) == email.strip().lower())
            .values(role=role, updated_at=datetime.now(timezone.utc))
            .returning(UserProfile.id)
        )
        changed = list(session.exec(stmt).scalars())
        session.commit()
        return changed
