from app.models.enums import Role
from app.repositories.profile_repo import ProfileRepository

from conftest import OLD_TIMESTAMP, auth_headers

API = "/api/v1"


def product_names(response):
    return [p["name"] for p in response.json()]


def test_public_listing_hides_inactive(client, catalog):
    response = client.get(f"{API}/products")

    assert response.status_code == 200
    assert product_names(response) == [catalog.active.name]
    assert response.json()[0]["category"]["name"] == "Diagnostic Equipment"


def test_include_inactive_ignored_for_non_admins(client, catalog, customer):
    anonymous = client.get(f"{API}/products", params={"include_inactive": "true"})
    signed_in = client.get(
        f"{API}/products",
        params={"include_inactive": "true"},
        headers=auth_headers(customer),
    )

    assert product_names(anonymous) == [catalog.active.name]
    assert product_names(signed_in) == [catalog.active.name]


def test_admin_sees_inactive(client, catalog, admin):
    response = client.get(
        f"{API}/products",
        params={"include_inactive": "true"},
        headers=auth_headers(admin),
    )

    assert set(product_names(response)) == {catalog.active.name, catalog.inactive.name}


def test_inactive_product_is_404_for_public(client, catalog, admin):
    url = f"{API}/products/{catalog.inactive.id}"

    assert client.get(url).status_code == 404
    assert client.get(url, headers=auth_headers(admin)).status_code == 200


def test_filters_and_sorting(client, catalog, admin):
    headers = auth_headers(admin)
    created = client.post(
        f"{API}/products",
        json={
            "name": "Portable ECG Monitor",
            "description": "Twelve-lead ECG with wireless sync.",
            "price": 3200,
            "stock": 12,
            "category_id": str(catalog.category.id),
        },
        headers=headers,
    )
    assert created.status_code == 201

    by_price = client.get(f"{API}/products", params={"sort": "price_asc"})
    assert product_names(by_price) == ["Portable ECG Monitor", catalog.active.name]

    cheap = client.get(f"{API}/products", params={"max_price": 5000})
    assert product_names(cheap) == ["Portable ECG Monitor"]

    search = client.get(f"{API}/products", params={"search": "radiography"})
    assert product_names(search) == [catalog.active.name]

    featured = client.get(f"{API}/products", params={"featured": "true"})
    assert product_names(featured) == [catalog.active.name]


def test_invalid_price_range_rejected(client, catalog):
    response = client.get(f"{API}/products", params={"min_price": 10, "max_price": 5})

    assert response.status_code == 422


def test_related_products(client, catalog, admin):
    client.post(
        f"{API}/products",
        json={
            "name": "Ultrasound US-2000",
            "description": "Color doppler ultrasound with three probes.",
            "price": 18000,
            "category_id": str(catalog.category.id),
        },
        headers=auth_headers(admin),
    )

    response = client.get(f"{API}/products/{catalog.active.id}/related")

    # Same category, active only, never the product itself
    assert product_names(response) == ["Ultrasound US-2000"]


def test_customer_cannot_update_product(client, catalog, customer):
    response = client.patch(
        f"{API}/products/{catalog.active.id}",
        json={"price": 1},
        headers=auth_headers(customer),
    )

    assert response.status_code == 403


def test_anonymous_cannot_create_product(client, catalog):
    response = client.post(
        f"{API}/products",
        json={"name": "X", "description": "Unauthorized product", "price": 1},
    )

    assert response.status_code == 401


def test_admin_update_refreshes_updated_at(client, catalog, admin):
    response = client.patch(
        f"{API}/products/{catalog.active.id}",
        json={"price": 43999.5, "specifications": {"warranty": "5 years"}},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["price"] == 43999.5
    assert body["specifications"] == {"warranty": "5 years"}
    assert body["name"] == catalog.active.name
    assert not body["updated_at"].startswith(OLD_TIMESTAMP.date().isoformat())


def test_toggle_active(client, catalog, admin):
    response = client.post(
        f"{API}/products/{catalog.active.id}/toggle-active",
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert client.get(f"{API}/products").json() == []


def test_unknown_category_rejected(client, admin):
    response = client.post(
        f"{API}/products",
        json={
            "name": "Defibrillator AED-500",
            "description": "Automated external defibrillator.",
            "price": 3500,
            "category_id": "00000000-0000-0000-0000-000000000001",
        },
        headers=auth_headers(admin),
    )

    assert response.status_code == 400


def test_demoted_admin_with_cached_profile_is_rejected(client, session, catalog, admin):
    headers = auth_headers(admin)
    # Loads and caches the admin profile
    assert client.get(f"{API}/users/me", headers=headers).json()["role"] == "admin"

    ProfileRepository().elevated_set_role(session, admin.id, Role.CUSTOMER)

    response = client.patch(
        f"{API}/products/{catalog.active.id}",
        json={"price": 1},
        headers=headers,
    )

    assert response.status_code == 403
    assert response.json() == {"detail": "Not allowed"}
    assert client.get(f"{API}/products/{catalog.active.id}").json()["price"] == 45000.0


def test_admin_delete_product(client, catalog, admin):
    url = f"{API}/products/{catalog.active.id}"

    assert client.delete(url, headers=auth_headers(admin)).status_code == 204
    assert client.get(url).status_code == 404
