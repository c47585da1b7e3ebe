import uuid

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.core.auth import get_current_profile, require_admin, require_auth
from app.core.principal import Principal
from app.database import get_session
from app.schemas.profile import (
    AdminPromotion,
    ProfileRead,
    ProfileRoleUpdate,
    ProfileUpdate,
)
from app.services.profile_service import ProfileService, get_profile_service

router = APIRouter(prefix="/users", tags=["Users"])


# -------- Self profile --------


@router.get("/me", response_model=ProfileRead)
def read_me(profile: ProfileRead = Depends(get_current_profile)):
    """
    Return the authenticated user's profile.

    Auth:
      - Requires valid Supabase JWT.
    """
    return profile


@router.patch("/me", response_model=ProfileRead)
def update_me(
    payload: ProfileUpdate,
    session: Session = Depends(get_session),
    current_user: Principal = Depends(require_auth),
    profiles: ProfileService = Depends(get_profile_service),
):
    """
    Update the authenticated user's profile (partial update).

    Currently, only `full_name` is editable.
    """
    profiles.get_profile(session, current_user.id, identity_loader=lambda: current_user)
    return profiles.update_profile(session, current_user.id, payload)


# -------- Admin endpoints --------


@router.get("", response_model=list[ProfileRead])
def list_users(
    session: Session = Depends(get_session),
    admin: ProfileRead = Depends(require_admin),
    profiles: ProfileService = Depends(get_profile_service),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
):
    """
    List all user profiles (admin only).
    """
    return profiles.list_profiles(session, admin.id, skip=skip, limit=limit)


@router.patch("/{user_id}/role", response_model=ProfileRead)
def change_role(
    user_id: uuid.UUID,
    payload: ProfileRoleUpdate,
    session: Session = Depends(get_session),
    admin: ProfileRead = Depends(require_admin),
    profiles: ProfileService = Depends(get_profile_service),
):
    """
    Update a user's role (admin only).

    Allowed roles: customer, admin.
    """
    return profiles.set_role(session, admin.id, user_id, payload.role)


@router.post("/promote", response_model=list[uuid.UUID])
def promote(
    payload: AdminPromotion,
    session: Session = Depends(get_session),
    admin: ProfileRead = Depends(require_admin),
    profiles: ProfileService = Depends(get_profile_service),
):
    """
    Grant admin to an already registered account, by email (admin only).

    This replaces self-service admin signup: a new administrator first
    signs up as a customer, then an existing admin promotes them.
    """
    return profiles.promote_by_email(session, admin.id, payload.email)
