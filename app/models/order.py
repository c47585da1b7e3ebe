import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field

from app.models.enums import OrderStatus, enum_column


class Order(SQLModel, table=True):
    """
    Customer order.

    - Anyone (including guests) may create one.
    - Readable by the owning customer and by admins.
    - Only admins change status.

    `products` is a snapshot of the ordered lines:
      [{"id", "name", "price", "quantity"}, ...]
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    # NULL for guest checkouts (and when the auth user is deleted)
    customer_id: uuid.UUID | None = Field(
        default=None,
        index=True,
    )

    customer_email: str
    customer_name: str
    customer_phone: str | None = None

    products: list[dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    total_amount: float = Field(
        ge=0,
        description="Sum of price * quantity over all lines",
    )

    status: OrderStatus = Field(
        default=OrderStatus.PENDING,
        sa_column=enum_column(OrderStatus, OrderStatus.PENDING, "order_status"),
    )

    shipping_address: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
    )

    notes: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last modification timestamp (UTC)",
    )
