import uuid
from datetime import datetime, timezone

from sqlalchemy import or_
from sqlmodel import Session, select

from app.core.policies import Viewer, order_read_filter, require_admin_row
from app.models.enums import OrderStatus
from app.models.order import Order


class OrderRepository:
    """
    Data access layer for orders.

    Policy:
      - anyone may insert
      - the owning customer and admins may read
      - only admins update
    """

    def list(
        self,
        session: Session,
        viewer_id: Viewer,
        search: str | None = None,
        status: OrderStatus | None = None,
        customer_id: uuid.UUID | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        stmt = select(Order).where(order_read_filter(viewer_id))

        if customer_id is not None:
            stmt = stmt.where(Order.customer_id == customer_id)

        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    Order.customer_name.ilike(pattern),
                    Order.customer_email.ilike(pattern),
                )
            )

        if status is not None:
            stmt = stmt.where(Order.status == status)

        stmt = stmt.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def get_by_id(
        self,
        session: Session,
        viewer_id: Viewer,
        order_id: uuid.UUID,
    ) -> Order | None:
        stmt = select(Order).where(Order.id == order_id, order_read_filter(viewer_id))
        return session.exec(stmt).first()

    def create(self, session: Session, order: Order) -> Order:
        """Public insert; no policy check."""
        session.add(order)
        session.commit()
        session.refresh(order)
        return order

    def update(self, session: Session, viewer_id: Viewer, order: Order) -> Order:
        require_admin_row(session, viewer_id, "orders", "update")
        order.updated_at = datetime.now(timezone.utc)
        session.add(order)
        session.commit()
        session.refresh(order)
        return order
