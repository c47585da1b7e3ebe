from conftest import auth_headers

API = "/api/v1"


def order_payload(**overrides):
    payload = {
        "customer_email": "buyer@hospital.example",
        "customer_name": "City Hospital",
        "customer_phone": "+1 555 0100",
        "products": [
            {"id": "p-1", "name": "Defibrillator AED-500", "price": 3500.0, "quantity": 2},
            {"id": "p-2", "name": "Pulse Oximeter", "price": 49.99, "quantity": 3},
        ],
        "shipping_address": {"street": "1 Main St", "city": "Springfield"},
    }
    payload.update(overrides)
    return payload


def test_guest_order_is_pending_with_computed_total(client):
    response = client.post(f"{API}/orders", json=order_payload())

    assert response.status_code == 201
    body = response.json()
    assert body["customer_id"] is None
    assert body["status"] == "pending"
    assert body["total_amount"] == 7149.97


def test_order_requires_lines(client):
    response = client.post(f"{API}/orders", json=order_payload(products=[]))

    assert response.status_code == 422


def test_order_visibility(client, customer, admin, create_profile):
    other = create_profile()
    placed = client.post(
        f"{API}/orders",
        json=order_payload(),
        headers=auth_headers(customer),
    ).json()
    url = f"{API}/orders/{placed['id']}"

    assert placed["customer_id"] == str(customer.id)
    assert client.get(url, headers=auth_headers(customer)).status_code == 200
    assert client.get(url, headers=auth_headers(other)).status_code == 404
    assert client.get(url, headers=auth_headers(admin)).status_code == 200
    assert client.get(url).status_code == 401


def test_my_orders_only_lists_own(client, customer, create_profile):
    other = create_profile()
    client.post(f"{API}/orders", json=order_payload(), headers=auth_headers(customer))
    client.post(f"{API}/orders", json=order_payload(), headers=auth_headers(other))
    client.post(f"{API}/orders", json=order_payload())

    response = client.get(f"{API}/orders/me", headers=auth_headers(customer))

    assert [o["customer_id"] for o in response.json()] == [str(customer.id)]


def test_admin_lists_and_filters_orders(client, admin, customer):
    client.post(f"{API}/orders", json=order_payload(), headers=auth_headers(customer))
    client.post(
        f"{API}/orders",
        json=order_payload(customer_email="clinic@example.com", customer_name="Sunrise Clinic"),
    )
    headers = auth_headers(admin)

    everything = client.get(f"{API}/orders", headers=headers).json()
    clinic = client.get(f"{API}/orders", params={"search": "sunrise"}, headers=headers).json()
    shipped = client.get(f"{API}/orders", params={"status": "shipped"}, headers=headers).json()

    assert len(everything) == 2
    assert [o["customer_name"] for o in clinic] == ["Sunrise Clinic"]
    assert shipped == []


def test_customer_cannot_list_all_orders(client, customer):
    response = client.get(f"{API}/orders", headers=auth_headers(customer))

    assert response.status_code == 403


def test_status_update_is_admin_only(client, admin, customer):
    placed = client.post(
        f"{API}/orders",
        json=order_payload(),
        headers=auth_headers(customer),
    ).json()
    url = f"{API}/orders/{placed['id']}/status"

    denied = client.patch(url, json={"status": "cancelled"}, headers=auth_headers(customer))
    allowed = client.patch(url, json={"status": "shipped"}, headers=auth_headers(admin))

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert allowed.json()["status"] == "shipped"


def test_unknown_status_rejected(client, admin, customer):
    placed = client.post(f"{API}/orders", json=order_payload()).json()

    response = client.patch(
        f"{API}/orders/{placed['id']}/status",
        json={"status": "lost"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 422
