import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import get_current_user, require_admin
from app.core.principal import Principal
from app.database import get_session
from app.repositories.category_repo import CategoryRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.product import (
    ProductCreate,
    ProductFilters,
    ProductRead,
    ProductUpdate,
)
from app.schemas.profile import ProfileRead
from app.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo, CategoryRepository())


def _viewer(user: Principal | None) -> uuid.UUID | None:
    return user.id if user is not None else None


# -------- Public endpoints --------


@router.get("", response_model=list[ProductRead])
def list_products(
    filters: Annotated[ProductFilters, Query()],
    session: Session = Depends(get_session),
    user: Principal | None = Depends(get_current_user),
):
    """
    List products.

    - Public endpoint; guests and customers only ever see active products.
    - Admins may pass `include_inactive=true`.
    - Filters: search, category_id, featured, min_price, max_price, sort.
    """
    return service.list_products(session, _viewer(user), filters)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    user: Principal | None = Depends(get_current_user),
):
    """
    Get a single product by id.

    Inactive products are 404 for everyone but admins.
    """
    return service.get_product(session, _viewer(user), product_id)


@router.get("/{product_id}/related", response_model=list[ProductRead])
def list_related_products(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    user: Principal | None = Depends(get_current_user),
):
    """Up to 4 other active products from the same category."""
    return service.list_related(session, _viewer(user), product_id)


# -------- Admin endpoints --------


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
    admin: ProfileRead = Depends(require_admin),
):
    """
    Create a new product (admin only).
    """
    return service.create_product(session, admin.id, payload)


@router.patch("/{product_id}", response_model=ProductRead)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
    admin: ProfileRead = Depends(require_admin),
):
    """
    Partially update a product (admin only).
    """
    return service.update_product(session, admin.id, product_id, payload)


@router.post("/{product_id}/toggle-active", response_model=ProductRead)
def toggle_product_active(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    admin: ProfileRead = Depends(require_admin),
):
    """Show / hide a product on the storefront (admin only)."""
    return service.toggle_active(session, admin.id, product_id)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    admin: ProfileRead = Depends(require_admin),
):
    """
    Permanently delete a product (admin only).
    """
    service.delete_product(session, admin.id, product_id)
