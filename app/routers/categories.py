import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import get_current_user, require_admin
from app.core.principal import Principal
from app.database import get_session
from app.repositories.category_repo import CategoryRepository
from app.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate
from app.schemas.profile import ProfileRead
from app.services.category_service import CategoryService

router = APIRouter(prefix="/categories", tags=["Categories"])

repo = CategoryRepository()
service = CategoryService(repo)


def _viewer(user: Principal | None) -> uuid.UUID | None:
    return user.id if user is not None else None


# -------- Public endpoints --------


@router.get("", response_model=list[CategoryRead])
def list_categories(
    session: Session = Depends(get_session),
    user: Principal | None = Depends(get_current_user),
    limit: int | None = Query(default=None, ge=1, le=200),
):
    """List categories ordered by name. Public endpoint."""
    return service.list_categories(session, _viewer(user), limit=limit)


@router.get("/{category_id}", response_model=CategoryRead)
def get_category(
    category_id: uuid.UUID,
    session: Session = Depends(get_session),
    user: Principal | None = Depends(get_current_user),
):
    return service.get_category(session, _viewer(user), category_id)


# -------- Admin endpoints --------


@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    session: Session = Depends(get_session),
    admin: ProfileRead = Depends(require_admin),
):
    return service.create_category(session, admin.id, payload)


@router.patch("/{category_id}", response_model=CategoryRead)
def update_category(
    category_id: uuid.UUID,
    payload: CategoryUpdate,
    session: Session = Depends(get_session),
    admin: ProfileRead = Depends(require_admin),
):
    return service.update_category(session, admin.id, category_id, payload)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: uuid.UUID,
    session: Session = Depends(get_session),
    admin: ProfileRead = Depends(require_admin),
):
    """
    Delete a category (admin only).
    Its products stay, with category_id cleared.
    """
    service.delete_category(session, admin.id, category_id)
