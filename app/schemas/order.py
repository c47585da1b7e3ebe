import uuid
from datetime import datetime
from typing import Any

from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field

from app.models.enums import OrderStatus


class OrderLine(SQLModel):
    """
    One ordered product, snapshotted at checkout time.
    """

    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    price: float = Field(ge=0)
    quantity: int = Field(gt=0)

    @field_validator("id", "name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class OrderCreate(SQLModel):
    """
    Payload for placing an order (guests allowed).

    Backend derives:
      - customer_id from the bearer token (None for guests)
      - status = 'pending'
      - total_amount from the lines
    """

    model_config = ConfigDict(extra="forbid")

    customer_email: EmailStr
    customer_name: str = Field(max_length=200)
    customer_phone: str | None = None
    products: list[OrderLine] = Field(min_length=1)
    shipping_address: dict[str, Any] | None = None
    notes: str | None = None

    @field_validator("customer_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("customer_name cannot be empty")
        return v

    @field_validator("customer_phone", "notes", mode="before")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class OrderRead(SQLModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    customer_id: uuid.UUID | None
    customer_email: str
    customer_name: str
    customer_phone: str | None
    products: list[dict[str, Any]]
    total_amount: float
    status: OrderStatus
    shipping_address: dict[str, Any] | None
    notes: str | None
    created_at: datetime
    updated_at: datetime


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
