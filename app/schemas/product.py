import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field

from app.schemas.category import CategoryRead

ProductSort = Literal["name", "price_asc", "price_desc", "newest"]


def _clean_images(v: list[str]) -> list[str]:
    cleaned = [url.strip() for url in v]
    if any(not url for url in cleaned):
        raise ValueError("image URLs cannot be empty")
    return cleaned


def _clean_specifications(v: dict[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for key, value in v.items():
        key = key.strip()
        if not key:
            raise ValueError("specification keys cannot be empty")
        if isinstance(value, (dict, list)):
            raise ValueError("specification values must be scalars")
        cleaned[key] = value
    return cleaned


class ProductRead(SQLModel):
    """
    Product representation for clients, with its category embedded.
    """

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str
    price: float
    stock: int
    category_id: uuid.UUID | None
    images: list[str]
    specifications: dict[str, Any]
    is_featured: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime
    category: CategoryRead | None = None


class ProductCreate(SQLModel):
    """
    Payload for creating a product.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)
    description: str = Field(min_length=10)
    price: float = Field(gt=0)
    stock: int = Field(default=0, ge=0)
    category_id: uuid.UUID | None = None
    images: list[str] = Field(default_factory=list)
    specifications: dict[str, Any] = Field(default_factory=dict)
    is_featured: bool = False
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("images")
    @classmethod
    def validate_images(cls, v: list[str]) -> list[str]:
        return _clean_images(v)

    @field_validator("specifications")
    @classmethod
    def validate_specifications(cls, v: dict[str, Any]) -> dict[str, Any]:
        return _clean_specifications(v)


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, min_length=10)
    price: float | None = Field(default=None, gt=0)
    stock: int | None = Field(default=None, ge=0)
    category_id: uuid.UUID | None = None
    images: list[str] | None = None
    specifications: dict[str, Any] | None = None
    is_featured: bool | None = None
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("images")
    @classmethod
    def validate_images(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else _clean_images(v)

    @field_validator("specifications")
    @classmethod
    def validate_specifications(cls, v: dict[str, Any] | None) -> dict[str, Any] | None:
        return None if v is None else _clean_specifications(v)


class ProductFilters(SQLModel):
    """
    Query options for product listings.

    `include_inactive` only widens the result for admins; the visibility
    policy still hides inactive rows from everyone else.
    """

    search: str | None = None
    category_id: uuid.UUID | None = None
    featured: bool | None = None
    min_price: float | None = Field(default=None, ge=0)
    max_price: float | None = Field(default=None, ge=0)
    include_inactive: bool = False
    exclude_id: uuid.UUID | None = None
    sort: ProductSort = "name"
    skip: int = Field(default=0, ge=0)
    limit: int = Field(default=50, ge=1, le=200)

    @field_validator("search")
    @classmethod
    def normalize_search(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None

    @model_validator(mode="after")
    def check_price_range(self) -> "ProductFilters":
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValueError("min_price cannot exceed max_price")
        return self
