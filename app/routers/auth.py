from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlmodel import Session

from app.core.auth import bearer_scheme, require_auth
from app.core.auth_session import AuthSessionManager
from app.core.principal import Principal
from app.core.supabase_client import new_supabase_client
from app.database import get_session
from app.schemas.auth import SessionRead, SignInRequest, SignOutRequest, SignUpRequest
from app.services.profile_service import ProfileService, get_profile_service

router = APIRouter(prefix="/auth", tags=["Auth"])


def get_auth_client() -> Any:
    """
    Fresh Supabase Auth client per request (in-memory session only).

    Overridden in tests with a fake.
    """
    return new_supabase_client().auth


def _session_snapshot(manager: AuthSessionManager) -> SessionRead:
    user = manager.user
    session = manager.session
    return SessionRead(
        user_id=user.id if user is not None else None,
        email=user.email if user is not None else None,
        access_token=session.access_token if session is not None else None,
        refresh_token=session.refresh_token if session is not None else None,
        profile=manager.user_profile,
        is_admin=manager.is_admin,
    )


@router.post("/sign-up", response_model=SessionRead, status_code=status.HTTP_201_CREATED)
def sign_up(
    payload: SignUpRequest,
    session: Session = Depends(get_session),
    profiles: ProfileService = Depends(get_profile_service),
    auth: Any = Depends(get_auth_client),
):
    """
    Register a customer account.

    The profile row is verified (and created if the signup trigger was
    late). New accounts are never admins.
    """
    with AuthSessionManager(auth, profiles, session) as manager:
        result = manager.sign_up(payload.email, payload.password, payload.full_name)
        if result.error:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=result.error,
            )
        return _session_snapshot(manager)


@router.post("/sign-in", response_model=SessionRead)
def sign_in(
    payload: SignInRequest,
    session: Session = Depends(get_session),
    profiles: ProfileService = Depends(get_profile_service),
    auth: Any = Depends(get_auth_client),
):
    """
    Email/password sign-in. Returns tokens plus the loaded profile.
    """
    with AuthSessionManager(auth, profiles, session) as manager:
        result = manager.sign_in(payload.email, payload.password)
        if result.error:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=result.error,
            )
        return _session_snapshot(manager)


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
def sign_out(
    payload: SignOutRequest,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    current_user: Principal = Depends(require_auth),
    session: Session = Depends(get_session),
    profiles: ProfileService = Depends(get_profile_service),
    auth: Any = Depends(get_auth_client),
):
    """
    Sign out and forget the cached profile.

    With a refresh token the session is also revoked in Supabase Auth.
    """
    with AuthSessionManager(auth, profiles, session) as manager:
        if payload.refresh_token and credentials is not None:
            manager.restore_session(credentials.credentials, payload.refresh_token)
        manager.sign_out()
    profiles.invalidate(current_user.id)
