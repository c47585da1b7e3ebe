import logging
import uuid
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, TypeVar

from fastapi import HTTPException, status
from sqlalchemy.exc import InterfaceError, OperationalError, SQLAlchemyError
from sqlmodel import Session

from app.core.config import get_settings
from app.core.errors import ProfileNotFoundError
from app.core.policies import Viewer, require_admin_row
from app.core.principal import Principal
from app.core.profile_cache import ProfileCache
from app.core.retry import with_retry
from app.models.enums import Role
from app.models.profile import UserProfile
from app.repositories.profile_repo import ProfileRepository
from app.schemas.profile import ProfileRead, ProfileUpdate

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Errors worth another attempt. Policy rejections and missing rows are not.
TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    OperationalError,
    InterfaceError,
    ConnectionError,
    TimeoutError,
)

IdentityLoader = Callable[[], Principal | None]


class ProfileService:
    """
    Business logic for user profiles.

    Responsibilities:
      - serve profiles through a TTL cache
      - self-heal a missing profile row on first login
      - retry transient store failures with backoff
      - gate admin-only role changes
    """

    def __init__(
        self,
        repo: ProfileRepository,
        cache: ProfileCache,
        max_attempts: int = 3,
        initial_delay: float = 1.0,
        sleep: Callable[[float], None] | None = None,
    ):
        self.repo = repo
        self.cache = cache
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self._sleep = sleep

    # ----- Helpers -----

    def _with_retry(self, session: Session, operation: Callable[[], T]) -> T:
        """Run a store operation with backoff, rolling back between attempts."""

        def attempt() -> T:
            try:
                return operation()
            except SQLAlchemyError:
                session.rollback()
                raise

        kwargs = {} if self._sleep is None else {"sleep": self._sleep}
        return with_retry(
            attempt,
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay,
            retry_on=TRANSIENT_ERRORS,
            **kwargs,
        )

    def _remember(self, principal_id: uuid.UUID, profile: UserProfile) -> ProfileRead:
        snapshot = ProfileRead.model_validate(profile)
        self.cache.set(principal_id, snapshot)
        return snapshot

    def _self_heal(
        self,
        session: Session,
        principal_id: uuid.UUID,
        identity_loader: IdentityLoader | None,
    ) -> UserProfile:
        """
        The row is missing, most likely because the signup trigger has not
        run yet. Re-read the principal from the auth subsystem and upsert a
        default customer profile for it.
        """
        identity = identity_loader() if identity_loader is not None else None
        if identity is None or identity.id != principal_id or not identity.email:
            logger.error(f"Profile not found for user {principal_id} and no identity to recreate it")
            raise ProfileNotFoundError(principal_id)

        logger.info(f"Profile not found, creating one for {identity.email}")
        return self._with_retry(
            session,
            lambda: self.repo.upsert_default(
                session,
                principal_id,
                principal_id,
                email=identity.email,
                full_name=identity.display_name,
            ),
        )

    # ----- Self profile -----

    def get_profile(
        self,
        session: Session,
        principal_id: uuid.UUID,
        identity_loader: IdentityLoader | None = None,
    ) -> ProfileRead:
        """
        Return the principal's profile.

        Flow:
          1. Cached and younger than the TTL => return it, no query.
          2. Read the row (with retry).
          3. Missing => self-heal via upsert (needs identity_loader).
          4. Cache the result.

        Raises:
            ProfileNotFoundError: row missing and no identity to recreate it.
            PolicyViolation / SQLAlchemyError: propagated after logging.
        """
        cached = self.cache.get(principal_id)
        if cached is not None:
            logger.debug(f"Returning cached profile for user {principal_id}")
            return cached

        logger.info(f"Fetching profile for user {principal_id}")
        try:
            profile = self._with_retry(
                session,
                lambda: self.repo.get_by_id(session, principal_id, principal_id),
            )
            if profile is None:
                profile = self._self_heal(session, principal_id, identity_loader)
        except ProfileNotFoundError:
            raise
        except Exception as exc:
            logger.error(
                f"get_profile failed: user={principal_id} "
                f"at={datetime.now(timezone.utc).isoformat()} error={exc!r}"
            )
            raise

        return self._remember(principal_id, profile)

    def update_profile(
        self,
        session: Session,
        principal_id: uuid.UUID,
        payload: ProfileUpdate,
    ) -> ProfileRead:
        """
        Apply a partial update to the principal's own profile and refresh
        the cache entry. Store errors propagate unchanged.
        """
        profile = self.repo.get_by_id(session, principal_id, principal_id)
        if profile is None:
            raise ProfileNotFoundError(principal_id)

        if payload.full_name is not None:
            profile.full_name = payload.full_name

        updated = self.repo.update(session, principal_id, profile)
        return self._remember(principal_id, updated)

    def invalidate(self, principal_id: uuid.UUID | None = None) -> None:
        """Forget one cached profile, or all of them."""
        self.cache.invalidate(principal_id)

    # ----- Admin operations -----

    def list_profiles(
        self,
        session: Session,
        actor_id: Viewer,
        skip: int = 0,
        limit: int = 50,
    ) -> list[UserProfile]:
        """List profiles (admins see everyone, others only themselves)."""
        return self.repo.list_visible(session, actor_id, skip=skip, limit=limit)

    def set_role(
        self,
        session: Session,
        actor_id: Viewer,
        profile_id: uuid.UUID,
        role: Role,
    ) -> ProfileRead:
        """
        Change a user's role. The actor must hold an admin row.

        Raises:
            PolicyViolation: actor is not an admin.
            HTTPException(404): profile not found.
        """
        require_admin_row(session, actor_id, "user_profiles", "update")
        profile = self.repo.elevated_set_role(session, profile_id, role)
        if profile is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        logger.info(f"Role of user {profile_id} set to {role.value} by {actor_id}")
        self.invalidate(profile_id)
        return ProfileRead.model_validate(profile)

    def promote_by_email(
        self,
        session: Session,
        actor_id: Viewer,
        email: str,
    ) -> list[uuid.UUID]:
        """
        Grant the admin role to the profile registered under `email`.

        Only existing admins can promote; self-service signups never do.

        Raises:
            PolicyViolation: actor is not an admin.
            HTTPException(404): no profile with that email.
        """
        require_admin_row(session, actor_id, "user_profiles", "update")
        changed = self.repo.elevated_set_role_by_email(session, email, Role.ADMIN)
        if not changed:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No user registered with this email",
            )
        logger.info(f"Promoted {email} to admin (by {actor_id})")
        for profile_id in changed:
            self.invalidate(profile_id)
        return changed


@lru_cache
def get_profile_service() -> ProfileService:
    """
    Process-wide ProfileService; it owns the one profile cache.

    Used as a FastAPI dependency so tests can override it.
    """
    settings = get_settings()
    return ProfileService(
        ProfileRepository(),
        ProfileCache(ttl_seconds=settings.PROFILE_CACHE_TTL_SECONDS),
        max_attempts=settings.RETRY_MAX_ATTEMPTS,
        initial_delay=settings.RETRY_INITIAL_DELAY_SECONDS,
    )
