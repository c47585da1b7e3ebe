import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import get_current_user, require_admin, require_auth
from app.core.principal import Principal
from app.database import get_session
from app.models.enums import OrderStatus
from app.repositories.order_repo import OrderRepository
from app.schemas.order import OrderCreate, OrderRead, OrderStatusUpdate
from app.schemas.profile import ProfileRead
from app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
service = OrderService(order_repo)


# -------- Customer-facing endpoints --------


@router.post("", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
def place_order(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    user: Principal | None = Depends(get_current_user),
):
    """
    Place an order.

    Auth:
      - Guests allowed; signed-in customers get the order linked to
        their account.
    """
    customer_id = user.id if user is not None else None
    return service.place_order(session, customer_id, payload)


@router.get("/me", response_model=list[OrderRead])
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: Principal = Depends(require_auth),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
):
    """
    List the authenticated user's orders.
    """
    return service.list_customer_orders(session, current_user.id, skip, limit)


@router.get("/{order_id}", response_model=OrderRead)
def get_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: Principal = Depends(require_auth),
):
    """
    Get a single order. Customers see their own orders, admins see all;
    anything else is 404.
    """
    return service.get_order(session, current_user.id, order_id)


# -------- Admin endpoints --------


@router.get("", response_model=list[OrderRead])
def list_all_orders(
    session: Session = Depends(get_session),
    admin: ProfileRead = Depends(require_admin),
    search: str | None = None,
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
):
    """
    List all orders (admin only).

    - search: matches customer name or email
    - status: exact status filter
    """
    return service.list_orders(
        session,
        admin.id,
        search=search,
        status_filter=status_filter,
        skip=skip,
        limit=limit,
    )


@router.patch("/{order_id}/status", response_model=OrderRead)
def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
    admin: ProfileRead = Depends(require_admin),
):
    """
    Update order status (admin only).

    Any of: pending, processing, shipped, delivered, cancelled.
    """
    return service.update_status(session, admin.id, order_id, payload)
