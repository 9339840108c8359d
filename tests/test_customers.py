from datetime import datetime, timedelta

from app.domain.customers import service as customer_service


def test_create_customer(client):
    response = client.post(
        "/api/customers",
        json={
            "name": "Ana García",
            "email": "Ana@Example.com",
            "phone": "612 345 678",
            "addresses": [{"street": "Calle Mayor 1", "city": "Madrid", "postal_code": "28013"}],
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "ana@example.com"
    assert data["phone"] == "+34612345678"
    assert data["segment"] == "NEW"
    assert data["order_count"] == 0


def test_create_customer_duplicate_email(client, make_customer):
    make_customer(email="ana@example.com")

    response = client.post("/api/customers", json={"name": "Ana", "email": "ana@example.com"})

    assert response.status_code == 409


def test_create_customer_invalid_email(client):
    response = client.post("/api/customers", json={"name": "Ana", "email": "not-an-email"})

    assert response.status_code == 422


def test_create_customer_sends_welcome_email(client, mocker):
    welcome = mocker.patch.object(customer_service, "send_welcome_email", return_value=True)

    response = client.post(
        "/api/customers",
        json={"name": "Ana", "email": "ana@example.com", "send_welcome": True},
    )

    assert response.status_code == 201
    welcome.assert_called_once()
    assert welcome.call_args[0][0].email == "ana@example.com"


def test_create_customer_without_welcome_email(client, mocker):
    welcome = mocker.patch.object(customer_service, "send_welcome_email", return_value=True)

    client.post("/api/customers", json={"name": "Ana", "email": "ana@example.com"})

    welcome.assert_not_called()


def test_list_customers_with_segments_and_stats(client, make_customer, make_order):
    now = datetime.utcnow()
    vip = make_customer(name="Vera", email="vera@example.com", created_at=now - timedelta(days=200))
    for day in range(1, 7):
        make_order(customer=vip, total=300, created_at=now - timedelta(days=day))
    make_customer(name="Nuevo", email="nuevo@example.com")

    response = client.get("/api/customers")

    assert response.status_code == 200
    data = response.json()
    assert data["pagination"]["total"] == 2
    assert data["stats"]["vip"] == 1
    by_email = {c["email"]: c for c in data["customers"]}
    assert by_email["vera@example.com"]["segment"] == "VIP"
    assert by_email["vera@example.com"]["total_spent"] == 1800
    assert by_email["nuevo@example.com"]["segment"] == "NEW"


def test_list_customers_filters_and_sorts(client, make_customer, make_order):
    ana = make_customer(name="Ana", email="ana@example.com")
    make_order(customer=ana, total=50)
    make_customer(name="Luis", email="luis@example.com")

    response = client.get("/api/customers", params={"segment": "REGULAR"})
    assert [c["name"] for c in response.json()["customers"]] == ["Ana"]

    response = client.get("/api/customers", params={"sort_by": "name", "sort_order": "asc"})
    assert [c["name"] for c in response.json()["customers"]] == ["Ana", "Luis"]

    response = client.get("/api/customers", params={"search": "LUIS"})
    assert [c["name"] for c in response.json()["customers"]] == ["Luis"]


def test_list_customers_rejects_unknown_sort_field(client):
    response = client.get("/api/customers", params={"sort_by": "password"})

    assert response.status_code == 400


def test_get_customer_not_found(client):
    assert client.get("/api/customers/999").status_code == 404


def test_update_customer(client, make_customer):
    customer = make_customer()

    response = client.patch(f"/api/customers/{customer.id}", json={"name": "Ana María"})

    assert response.status_code == 200
    assert response.json()["name"] == "Ana María"


def test_update_customer_email_conflict(client, make_customer):
    make_customer(email="taken@example.com")
    customer = make_customer(email="ana@example.com")

    response = client.patch(f"/api/customers/{customer.id}", json={"email": "taken@example.com"})

    assert response.status_code == 409


def test_delete_customer(client, make_customer):
    customer = make_customer()

    response = client.delete(f"/api/customers/{customer.id}")

    assert response.status_code == 200
    assert client.get(f"/api/customers/{customer.id}").status_code == 404


def test_delete_customer_with_orders(client, make_customer, make_order):
    customer = make_customer()
    make_order(customer=customer)

    response = client.delete(f"/api/customers/{customer.id}")

    assert response.status_code == 400


def test_export_customers_csv(client, make_customer):
    make_customer(name="Ana", email="ana@example.com")

    response = client.get("/api/customers/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.strip().splitlines()
    assert lines[0].startswith("ID,Name,Email")
    assert "ana@example.com" in lines[1]
