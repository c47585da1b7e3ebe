import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.policies import Viewer
from app.models.enums import OrderStatus
from app.models.order import Order
from app.repositories.order_repo import OrderRepository
from app.schemas.order import OrderCreate, OrderStatusUpdate


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Create orders for customers and guests
      - Compute total_amount from the submitted lines
      - Status changes (admin only, enforced by the repository policy)
    """

    def __init__(self, order_repo: OrderRepository):
        self.order_repo = order_repo

    # -------- Customer-facing operations --------

    def place_order(
        self,
        session: Session,
        customer_id: uuid.UUID | None,
        payload: OrderCreate,
    ) -> Order:
        """
        Persist a new pending order.

        customer_id comes from the bearer token (None for guests), never
        from the payload.
        """
        lines = [line.model_dump() for line in payload.products]
        total = round(sum(line["price"] * line["quantity"] for line in lines), 2)

        order = Order(
            customer_id=customer_id,
            customer_email=payload.customer_email,
            customer_name=payload.customer_name,
            customer_phone=payload.customer_phone,
            products=lines,
            total_amount=total,
            status=OrderStatus.PENDING,
            shipping_address=payload.shipping_address,
            notes=payload.notes,
        )
        return self.order_repo.create(session, order)

    def list_customer_orders(
        self,
        session: Session,
        customer_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        return self.order_repo.list(
            session,
            customer_id,
            customer_id=customer_id,
            skip=skip,
            limit=limit,
        )

    # -------- Admin operations --------

    def list_orders(
        self,
        session: Session,
        viewer_id: Viewer,
        search: str | None = None,
        status_filter: OrderStatus | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        """Orders visible to the viewer: all for admins, own ones otherwise."""
        search = search.strip() if search else None
        return self.order_repo.list(
            session,
            viewer_id,
            search=search or None,
            status=status_filter,
            skip=skip,
            limit=limit,
        )

    def get_order(
        self,
        session: Session,
        viewer_id: Viewer,
        order_id: uuid.UUID,
    ) -> Order:
        order = self.order_repo.get_by_id(session, viewer_id, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return order

    def update_status(
        self,
        session: Session,
        viewer_id: Viewer,
        order_id: uuid.UUID,
        payload: OrderStatusUpdate,
    ) -> Order:
        order = self.get_order(session, viewer_id, order_id)
        order.status = payload.status
        return self.order_repo.update(session, viewer_id, order)
