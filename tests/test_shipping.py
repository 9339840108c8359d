def test_create_shipping_method(client):
    response = client.post(
        "/api/shipping-methods",
        json={"name": " Express ", "price": 6.5, "estimated_days": "1-2"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["shipping_method"]["name"] == "Express"
    assert data["message"] == "Shipping method created"


def test_create_shipping_method_duplicate_name(client, make_shipping_method):
    make_shipping_method(name="Express")

    response = client.post("/api/shipping-methods", json={"name": "Express", "price": 3})

    assert response.status_code == 400


def test_create_shipping_method_negative_price(client):
    response = client.post("/api/shipping-methods", json={"name": "Free", "price": -1})

    assert response.status_code == 422


def test_list_only_active_by_default(client, make_shipping_method):
    make_shipping_method(name="Standard", price=4.95)
    make_shipping_method(name="Pickup", price=0, is_active=False)

    active = client.get("/api/shipping-methods").json()["shipping_methods"]
    everything = client.get("/api/shipping-methods", params={"include_inactive": True}).json()

    assert [m["name"] for m in active] == ["Standard"]
    assert [m["name"] for m in everything["shipping_methods"]] == ["Standard", "Pickup"]


def test_quote_applies_free_shipping_threshold(client, make_shipping_method):
    make_shipping_method(name="Standard", price=4.95, free_shipping_threshold=50)

    below = client.get("/api/shipping-methods/quote", params={"subtotal": 49.99}).json()
    above = client.get("/api/shipping-methods/quote", params={"subtotal": 50}).json()

    assert below[0]["cost"] == 4.95
    assert below[0]["free_shipping"] is False
    assert above[0]["cost"] == 0
    assert above[0]["free_shipping"] is True


def test_update_shipping_method(client, make_shipping_method):
    method = make_shipping_method(name="Standard")

    response = client.put(f"/api/shipping-methods/{method.id}", json={"price": 3.5})

    assert response.status_code == 200
    assert response.json()["price"] == 3.5


def test_update_to_existing_name(client, make_shipping_method):
    make_shipping_method(name="Express")
    method = make_shipping_method(name="Standard")

    response = client.put(f"/api/shipping-methods/{method.id}", json={"name": "Express"})

    assert response.status_code == 400


def test_delete_method_used_by_orders(client, make_shipping_method, make_order):
    method = make_shipping_method(name="Standard")
    make_order(shipping_method="Standard")

    response = client.delete(f"/api/shipping-methods/{method.id}")

    assert response.status_code == 400


def test_method_used_by_orders_cannot_be_renamed(client, make_shipping_method, make_order):
    method = make_shipping_method(name="Express")
    make_order(shipping_method="Express")

    rename = client.put(f"/api/shipping-methods/{method.id}", json={"name": "Express 24h"})

    assert rename.status_code == 400
    assert client.get(f"/api/shipping-methods/{method.id}").json()["name"] == "Express"
    assert client.delete(f"/api/shipping-methods/{method.id}").status_code == 400


def test_unused_method_can_be_renamed(client, make_shipping_method):
    method = make_shipping_method(name="Express")

    response = client.put(f"/api/shipping-methods/{method.id}", json={"name": "Express 24h", "price": 6.5})

    assert response.status_code == 200
    assert response.json()["name"] == "Express 24h"


def test_bulk_deactivate(client, make_shipping_method):
    first = make_shipping_method(name="Standard")
    second = make_shipping_method(name="Express")

    response = client.patch(
        "/api/shipping-methods",
        json={"action": "deactivate", "method_ids": [first.id, second.id]},
    )

    assert response.status_code == 200
    assert response.json()["count"] == 2
    assert client.get("/api/shipping-methods").json()["shipping_methods"] == []


def test_bulk_invalid_action(client, make_shipping_method):
    method = make_shipping_method()

    response = client.patch("/api/shipping-methods", json={"action": "archive", "method_ids": [method.id]})

    assert response.status_code == 400


def test_bulk_delete_blocked_by_orders(client, make_shipping_method, make_order):
    method = make_shipping_method(name="Standard")
    make_order(shipping_method="Standard")

    response = client.patch("/api/shipping-methods", json={"action": "delete", "method_ids": [method.id]})

    assert response.status_code == 400
