import pytest

from app.core.errors import PolicyViolation
from app.core.policies import has_admin_row
from app.models.enums import Role
from app.models.order import Order
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.profile_repo import ProfileRepository
from app.schemas.product import ProductFilters


def test_has_admin_row(session, admin, customer):
    assert has_admin_row(session, admin.id) is True
    assert has_admin_row(session, customer.id) is False
    assert has_admin_row(session, None) is False


def test_product_visibility_by_viewer(session, catalog, admin, customer):
    repo = ProductRepository()
    filters = ProductFilters(include_inactive=True)

    public_ids = {p.id for p in repo.list(session, None, filters)}
    customer_ids = {p.id for p in repo.list(session, customer.id, filters)}
    admin_ids = {p.id for p in repo.list(session, admin.id, filters)}

    assert public_ids == customer_ids == {catalog.active.id}
    assert admin_ids == {catalog.active.id, catalog.inactive.id}
    assert repo.get_by_id(session, None, catalog.inactive.id) is None


def test_product_write_rejected_for_non_admin(session, catalog, customer):
    repo = ProductRepository()
    product = repo.get_by_id(session, customer.id, catalog.active.id)
    product.price = 1.0

    with pytest.raises(PolicyViolation) as exc_info:
        repo.update(session, customer.id, product)

    assert exc_info.value.table == "products"
    session.rollback()


def test_policy_checks_database_not_cached_role(session, catalog, admin, profile_service):
    # Cached as admin, then demoted in the database: writes must fail.
    assert profile_service.get_profile(session, admin.id).role is Role.ADMIN
    ProfileRepository().elevated_set_role(session, admin.id, Role.CUSTOMER)

    repo = ProductRepository()
    product = repo.get_by_id(session, admin.id, catalog.active.id)
    with pytest.raises(PolicyViolation):
        repo.update(session, admin.id, product)

    assert profile_service.cache.get(admin.id).role is Role.ADMIN


def test_order_visibility(session, admin, customer, create_profile):
    other = create_profile()
    repo = OrderRepository()
    order = repo.create(
        session,
        Order(
            customer_id=customer.id,
            customer_email=customer.email,
            customer_name="Buyer",
            products=[{"id": "1", "name": "AED-500", "price": 3500, "quantity": 1}],
            total_amount=3500,
        ),
    )

    assert repo.get_by_id(session, customer.id, order.id) is not None
    assert repo.get_by_id(session, other.id, order.id) is None
    assert repo.get_by_id(session, None, order.id) is None
    assert repo.get_by_id(session, admin.id, order.id) is not None


def test_profiles_visible_to_self_and_admin(session, admin, customer, create_profile):
    other = create_profile()
    repo = ProfileRepository()

    assert repo.get_by_id(session, customer.id, customer.id) is not None
    assert repo.get_by_id(session, other.id, customer.id) is None
    assert repo.get_by_id(session, admin.id, customer.id) is not None
    assert {p.id for p in repo.list_visible(session, customer.id)} == {customer.id}
    assert len(repo.list_visible(session, admin.id)) == 3


def test_profile_insert_only_for_self(session, customer, create_profile):
    other = create_profile()
    with pytest.raises(PolicyViolation):
        ProfileRepository().upsert_default(session, customer.id, other.id, other.email, None)


def test_elevated_role_change_by_email_bypasses_policies(session, customer):
    changed = ProfileRepository().elevated_set_role_by_email(session, customer.email, Role.ADMIN)

    assert changed == [customer.id]
    assert has_admin_row(session, customer.id) is True
