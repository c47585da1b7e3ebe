from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session
from supabase import AuthError

from app.core.config import get_settings
from app.core.errors import ProfileNotFoundError
from app.core.principal import Principal
from app.core.supabase_client import supabase_public
from app.database import get_session
from app.models.enums import Role
from app.schemas.profile import ProfileRead
from app.services.profile_service import ProfileService, get_profile_service

settings = get_settings()

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so we can support "guest" mode (unauthenticated).
bearer_scheme = HTTPBearer(auto_error=False)


def is_admin(profile: ProfileRead | None) -> bool:
    """
    Derived admin flag: True iff the profile's role is admin.

    Advisory only (route gating / UI). Data access is authorized by the
    row-level policies, which re-check the database on every query.
    """
    return profile is not None and profile.role == Role.ADMIN


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a Supabase access token (JWT).

    Verification:
      - signature (HS256 using SUPABASE_JWT_SECRET)
      - expiration time (exp)
      - audience is NOT verified (Supabase 'aud' may vary)

    Args:
        token: raw JWT from the Authorization header.

    Returns:
        Decoded JWT claims.

    Raises:
        HTTPException(401): if token is invalid/expired.
    """
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def _principal_from_supabase(token: str) -> Principal:
    """
    Ask Supabase Auth who owns the token (used when no JWT secret is set).
    """
    try:
        response = supabase_public().auth.get_user(token)
    except AuthError:
        response = None
    if response is None or response.user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    return Principal.from_auth_user(response.user)


def resolve_principal(token: str) -> Principal:
    """
    Turn a bearer token into a Principal.

    Raises:
        HTTPException(401): if token is invalid or missing required claims.
    """
    if not settings.SUPABASE_JWT_SECRET:
        return _principal_from_supabase(token)

    claims = decode_access_token(token)
    if not claims.get("sub") or not claims.get("email"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing sub/email",
        )
    try:
        return Principal.from_claims(claims)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid sub in token",
        )


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Principal | None:
    """
    Resolve the current principal from a Supabase JWT.

    Returns:
        Principal if authenticated, else None for guests.
    """
    if credentials is None:
        return None  # guest mode
    return resolve_principal(credentials.credentials)


def require_auth(user: Principal | None = Depends(get_current_user)) -> Principal:
    """
    Enforce authentication.

    If attached to a route, guests (missing/invalid JWT)
    will be rejected with 401.

    Raises:
        HTTPException(401): if user is None.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


def get_current_profile(
    user: Principal = Depends(require_auth),
    session: Session = Depends(get_session),
    profiles: ProfileService = Depends(get_profile_service),
) -> ProfileRead:
    """
    Load the authenticated user's profile (cached, self-healing).

    A missing row is recreated from the token's own claims.

    Raises:
        HTTPException(404): if the profile cannot be loaded or recreated.
    """
    try:
        return profiles.get_profile(session, user.id, identity_loader=lambda: user)
    except ProfileNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )


def require_admin(profile: ProfileRead = Depends(get_current_profile)) -> ProfileRead:
    """
    Enforce admin role (advisory gate in front of admin routes).

    Raises:
        HTTPException(403): if role is not admin.
    """
    if not is_admin(profile):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return profile
