import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field, Relationship

from app.models.category import Category


class Product(SQLModel, table=True):
    """
    Medical equipment catalog entry.

    Visibility:
      - public readers only see rows with is_active = true
      - admins see every row and are the only writers
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        index=True,
        description="Display name of the equipment",
    )

    description: str = Field(
        description="Long description shown on the product page",
    )

    price: float = Field(
        ge=0,
        description="Unit price",
    )

    stock: int = Field(
        default=0,
        ge=0,
        description="How many units currently in stock",
    )

    category_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="categories.id",
        ondelete="SET NULL",
        index=True,
    )

    # Ordered list of image URLs
    images: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    # Free-form technical specs, e.g. {"resolution": "4096x4096 pixels"}
    specifications: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )

    is_featured: bool = Field(
        default=False,
        index=True,
        description="Shown on the storefront home page",
    )

    is_active: bool = Field(
        default=True,
        index=True,
        description="Whether this product is visible on the storefront",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last modification timestamp (UTC)",
    )

    category: Category | None = Relationship()
