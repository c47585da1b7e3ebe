"""
Auth session manager.

Wraps a Supabase Auth client (supabase-py `client.auth`) and keeps the
current user, session and profile in sync with auth-state-changed events:

  - any event carrying a user reloads that user's profile
  - an event without a user clears the profile

Each applied session bumps a generation counter; a profile load that
finishes after a newer session was applied is discarded.

Typical use (one manager per sign-in request):

    with AuthSessionManager(client.auth, profile_service, db) as manager:
        result = manager.sign_in(email, password)
        if result.error:
            ...
        manager.user_profile, manager.is_admin
"""

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Any

from sqlmodel import Session
from supabase import AuthError

from app.core.auth import is_admin
from app.core.principal import Principal
from app.schemas.profile import ProfileRead
from app.services.profile_service import ProfileService

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """Outcome of sign-in / sign-up. Failures carry `error`, never raise."""

    user: Any = None
    session: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class AuthSessionManager:
    def __init__(self, auth: Any, profiles: ProfileService, db: Session):
        self.auth = auth
        self.profiles = profiles
        self.db = db

        self._lock = threading.RLock()
        self._user: Any = None
        self._session: Any = None
        self._profile: ProfileRead | None = None
        self._loading = True
        self._generation = 0
        self._subscription: Any = None

    # ----- Lifecycle -----

    def start(self) -> "AuthSessionManager":
        """Subscribe to auth events and apply the current session, if any."""
        if self._subscription is None:
            self._subscription = self.auth.on_auth_state_change(self._on_auth_state_change)
        self._apply_session(self.auth.get_session())
        return self

    def close(self) -> None:
        """Unsubscribe from auth events. Safe to call twice."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def __enter__(self) -> "AuthSessionManager":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ----- State -----

    @property
    def user(self) -> Any:
        return self._user

    @property
    def session(self) -> Any:
        return self._session

    @property
    def user_profile(self) -> ProfileRead | None:
        return self._profile

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def is_admin(self) -> bool:
        """Advisory only; data access is authorized by the row-level policies."""
        return is_admin(self._profile)

    def _on_auth_state_change(self, event: str, session: Any) -> None:
        logger.info(f"Auth state changed: {event}")
        self._apply_session(session)

    def _apply_session(self, session: Any) -> None:
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._session = session
            self._user = getattr(session, "user", None) if session else None
            user = self._user
            if user is None:
                self._profile = None
                self._loading = False
                return
            self._loading = True

        self._load_profile(uuid.UUID(str(user.id)), generation)

    def _load_profile(self, user_id: uuid.UUID, generation: int) -> None:
        try:
            profile = self.profiles.get_profile(
                self.db,
                user_id,
                identity_loader=self.current_principal,
            )
        except Exception:
            logger.exception(f"Error loading user profile for {user_id}")
            profile = None

        with self._lock:
            if generation != self._generation:
                logger.info(f"Discarding stale profile load for {user_id}")
                return
            self._profile = profile
            self._loading = False

    def current_principal(self) -> Principal | None:
        """Re-read the signed-in user from Supabase Auth."""
        try:
            response = self.auth.get_user()
        except AuthError as exc:
            logger.warning(f"Could not read current user from auth: {exc}")
            return None
        if response is None or response.user is None:
            return None
        return Principal.from_auth_user(response.user)

    # ----- Operations -----

    def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            response = self.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as exc:
            logger.info(f"Sign-in failed for {email}: {exc}")
            return AuthResult(error=str(exc))
        return AuthResult(user=response.user, session=response.session)

    def sign_up(
        self,
        email: str,
        password: str,
        full_name: str | None = None,
    ) -> AuthResult:
        """
        Register a new user, then make sure the profile row exists.

        The signup trigger normally creates it; if it is late, the profile
        service inserts it. Verification problems are logged and leave
        `user_profile` unset, they do not fail the signup.

        With email confirmation on, an already registered email comes back
        as a user without identities and no session; no profile is touched.
        """
        try:
            response = self.auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"data": {"full_name": full_name or email}},
                }
            )
        except AuthError as exc:
            logger.info(f"Sign-up failed for {email}: {exc}")
            return AuthResult(error=str(exc))

        user = response.user
        if user is not None and response.session is None and getattr(user, "identities", None) == []:
            # Email already registered: Supabase returns a placeholder user
            # with a random id, which must not get a profile row.
            logger.info(f"Sign-up for {email} matched an existing account, skipping profile")
            return AuthResult(user=user, session=None)

        if user is not None:
            principal = Principal.from_auth_user(user)
            try:
                profile = self.profiles.get_profile(
                    self.db,
                    principal.id,
                    identity_loader=lambda: principal,
                )
            except Exception:
                logger.exception(f"Could not verify profile for new user {principal.id}")
            else:
                with self._lock:
                    if self._user is None or str(self._user.id) == str(user.id):
                        self._user = user
                        self._profile = profile
                        self._loading = False

        return AuthResult(user=user, session=response.session)

    def restore_session(self, access_token: str, refresh_token: str) -> AuthResult:
        try:
            response = self.auth.set_session(access_token, refresh_token)
        except AuthError as exc:
            return AuthResult(error=str(exc))
        self._apply_session(response.session)
        return AuthResult(user=response.user, session=response.session)

    def sign_out(self) -> None:
        user = self._user
        self.auth.sign_out()
        if user is not None:
            self.profiles.invalidate(uuid.UUID(str(user.id)))
        self._apply_session(None)

    def refresh_profile(self) -> None:
        """Drop the cached profile and load it again from the store."""
        user = self._user
        if user is None:
            return
        user_id = uuid.UUID(str(user.id))
        self.profiles.invalidate(user_id)
        with self._lock:
            generation = self._generation
        self._load_profile(user_id, generation)
