"""
Row-level policies for the storefront tables.

The backend talks to Postgres over a direct connection, which bypasses
Supabase RLS. Every repository query therefore runs through the predicates
below, which mirror the policies installed in the database:

    user_profiles  select   self, or admin
                   insert   self
                   update   self
    categories     select   anyone
                   write    admin
    products       select   is_active, or admin (any row)
                   write    admin
    orders         insert   anyone
                   select   customer_id = self, or admin
                   write    admin
    messages       insert   anyone
                   all      admin

"admin" always means: a user_profiles row exists with id = viewer and
role = 'admin'. It is evaluated in SQL on each call, never taken from the
profile cache.

A viewer id of None is the anonymous (public) role.
"""

import uuid

from sqlalchemy import exists, false, or_, true
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.orm import aliased
from sqlmodel import Session, select

from app.core.errors import PolicyViolation
from app.models.enums import Role
from app.models.order import Order
from app.models.product import Product
from app.models.profile import UserProfile

Viewer = uuid.UUID | None


def admin_row_exists(viewer_id: Viewer) -> ColumnElement[bool]:
    """SQL predicate: EXISTS a user_profiles row with id = viewer and role = admin."""
    if viewer_id is None:
        return false()
    # Aliased so the subquery never correlates with an outer user_profiles query
    admin = aliased(UserProfile, name="admin_profiles")
    return exists().where(
        admin.id == viewer_id,
        admin.role == Role.ADMIN,
    )


def has_admin_row(session: Session, viewer_id: Viewer) -> bool:
    if viewer_id is None:
        return False
    stmt = select(UserProfile.id).where(
        UserProfile.id == viewer_id,
        UserProfile.role == Role.ADMIN,
    )
    return session.exec(stmt).first() is not None


def require_admin_row(
    session: Session,
    viewer_id: Viewer,
    table: str,
    operation: str,
) -> None:
    """
    Raises:
        PolicyViolation: if the viewer has no admin row.
    """
    if not has_admin_row(session, viewer_id):
        raise PolicyViolation(table, operation)


# ----- Read predicates -----


def profile_read_filter(viewer_id: Viewer) -> ColumnElement[bool]:
    if viewer_id is None:
        return false()
    return or_(UserProfile.id == viewer_id, admin_row_exists(viewer_id))


def category_read_filter(viewer_id: Viewer) -> ColumnElement[bool]:
    return true()


def product_read_filter(viewer_id: Viewer) -> ColumnElement[bool]:
    return or_(Product.is_active == True, admin_row_exists(viewer_id))  # noqa: E712


def order_read_filter(viewer_id: Viewer) -> ColumnElement[bool]:
    if viewer_id is None:
        return false()
    return or_(Order.customer_id == viewer_id, admin_row_exists(viewer_id))


def message_read_filter(viewer_id: Viewer) -> ColumnElement[bool]:
    return admin_row_exists(viewer_id)


# ----- Write checks -----


def check_profile_write(viewer_id: Viewer, profile_id: uuid.UUID, operation: str) -> None:
    """Principals may insert/update only their own profile row."""
    if viewer_id is None or viewer_id != profile_id:
        raise PolicyViolation("user_profiles", operation)
