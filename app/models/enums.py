import enum

from sqlalchemy import Column, Enum as SAEnum


class Role(str, enum.Enum):
    """Application role stored on user_profiles.role."""

    ADMIN = "admin"
    CUSTOMER = "customer"


class OrderStatus(str, enum.Enum):
    """Order lifecycle stored on orders.status."""

    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


def enum_column(enum_cls: type[enum.Enum], default: enum.Enum, name: str) -> Column:
    """
    Text column restricted to the enum's *values*.

    SQLAlchemy stores member names by default ("ADMIN"); the Supabase schema
    stores lowercase values guarded by a CHECK constraint, so persist values
    and skip native Postgres enum types.
    """
    return Column(
        SAEnum(
            enum_cls,
            name=name,
            native_enum=False,
            values_callable=lambda members: [m.value for m in members],
            validate_strings=True,
        ),
        nullable=False,
        default=default,
        index=True,
    )
