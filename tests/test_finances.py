from datetime import datetime, timedelta

import pytest

from app.domain.finances.service import InvoiceService, next_invoice_number
from app.models_invoice import Invoice
from app.settings_store import set_json_setting, set_settings


@pytest.fixture
def invoiced_order(make_product, make_order):
    """An order of 121.00 with 21.00 of tax."""
    product = make_product(name="Taza", slug="taza")
    return make_order(total=121.0, tax_amount=21.0, product=product, quantity=2, status="DELIVERED")


def create_invoice(client, order_id, **extra):
    return client.post("/api/invoices", json={"order_id": order_id, **extra})


def test_next_invoice_number(db):
    assert next_invoice_number(db, 2024) == "2024-0001"

    db.add(Invoice(order_id=1, invoice_number="2024-0007", subtotal=0, tax_rate=0.21, tax_amount=0,
                   total_amount=0, customer_name="A", customer_email="a@example.com", company_name="X"))
    db.add(Invoice(order_id=2, invoice_number="2023-0042", subtotal=0, tax_rate=0.21, tax_amount=0,
                   total_amount=0, customer_name="A", customer_email="a@example.com", company_name="X"))
    db.commit()

    assert next_invoice_number(db, 2024) == "2024-0008"
    assert next_invoice_number(db, 2025) == "2025-0001"


def test_create_invoice_from_order(client, invoiced_order):
    response = create_invoice(client, invoiced_order.id, notes="Thanks")

    assert response.status_code == 201
    data = response.json()
    assert data["invoice_number"] == f"{datetime.utcnow().year}-0001"
    assert data["order_number"] == invoiced_order.order_number
    assert data["status"] == "PENDING"
    assert data["subtotal"] == 100
    assert data["tax_amount"] == 21
    assert data["total_amount"] == 121
    assert data["payment_terms"] == "30 days"
    assert data["company_name"] == "Storefront Personalizados"
    assert data["line_items"] == [
        {"product_name": "Taza", "variant_name": None, "quantity": 2, "unit_price": 60.5, "total_price": 121.0}
    ]
    issue = datetime.fromisoformat(data["issue_date"])
    due = datetime.fromisoformat(data["due_date"])
    assert (due - issue).days == 30


def test_invoice_applies_tax_when_order_has_none(client, make_order):
    order = make_order(total=100.0, tax_amount=0.0)

    data = create_invoice(client, order.id).json()

    assert data["subtotal"] == 100
    assert data["tax_amount"] == 21
    assert data["total_amount"] == 121


def test_invoice_tax_follows_configured_rate(client, make_order, mocker):
    mocker.patch("app.domain.finances.service.DEFAULT_TAX_RATE", 0.10)
    order = make_order(total=100.0, tax_amount=0.0)

    data = create_invoice(client, order.id).json()

    assert data["tax_amount"] == 10
    assert data["total_amount"] == 110


def test_invoice_uses_company_settings(client, db, invoiced_order):
    set_settings(db, {"company_name": "Taller Creativo SL", "company_tax_id": "B87654321"})
    set_json_setting(db, "company_address", {"street": "Gran Vía 1", "city": "Madrid"})

    data = create_invoice(client, invoiced_order.id).json()

    assert data["company_name"] == "Taller Creativo SL"
    assert data["company_tax_id"] == "B87654321"
    assert data["company_address"]["street"] == "Gran Vía 1"
    assert data["company_email"] == "facturacion@storefront.es"


def test_second_invoice_for_order_is_rejected(client, invoiced_order):
    create_invoice(client, invoiced_order.id)

    response = create_invoice(client, invoiced_order.id)

    assert response.status_code == 400
    assert response.json()["detail"] == "This order already has an invoice"


def test_invoice_for_missing_order(client):
    assert create_invoice(client, 999).status_code == 404


def test_list_invoices_with_status_filter(client, make_order):
    first = create_invoice(client, make_order().id).json()
    create_invoice(client, make_order().id)
    client.patch(f"/api/invoices/{first['id']}", json={"status": "PAID"})

    data = client.get("/api/invoices", params={"status": "PAID"}).json()

    assert [i["id"] for i in data["invoices"]] == [first["id"]]
    assert data["pagination"] == {"page": 1, "limit": 20, "total": 1, "pages": 1}


def test_mark_invoice_paid_sets_paid_at(client, invoiced_order):
    invoice = create_invoice(client, invoiced_order.id).json()

    data = client.patch(f"/api/invoices/{invoice['id']}", json={"status": "PAID"}).json()

    assert data["status"] == "PAID"
    assert data["paid_at"] is not None


def test_invalid_invoice_status(client, invoiced_order):
    invoice = create_invoice(client, invoiced_order.id).json()

    response = client.patch(f"/api/invoices/{invoice['id']}", json={"status": "LOST"})

    assert response.status_code == 422


def test_invoice_pdf(client, invoiced_order):
    invoice = create_invoice(client, invoiced_order.id).json()

    response = client.get(f"/api/invoices/{invoice['id']}/pdf")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == (
        f"inline; filename=invoice-{invoice['invoice_number']}.pdf"
    )
    assert response.content.startswith(b"%PDF")


def test_invoice_pdf_not_found(client):
    assert client.get("/api/invoices/999/pdf").status_code == 404


def test_export_invoices_csv(client, invoiced_order):
    create_invoice(client, invoiced_order.id)

    response = client.get("/api/invoices/export")

    assert response.status_code == 200
    lines = response.text.strip().splitlines()
    assert lines[0] == "Invoice,Order,Status,Customer,Email,Subtotal,Tax,Total,Issued,Due,Paid"
    assert "121.00" in lines[1]


def test_dashboard_totals(db, make_order):
    now = datetime(2024, 6, 30, 12, 0)
    old = make_order(total=50, created_at=now - timedelta(days=60))
    recent = make_order(total=100, created_at=now - timedelta(days=3))
    make_order(total=999, status="CANCELLED", created_at=now - timedelta(days=1))
    make_order(total=30, created_at=now - timedelta(days=2))

    def invoice(order, number, status, issued, due):
        db.add(Invoice(order_id=order.id, invoice_number=number, status=status, subtotal=0,
                       tax_rate=0.21, tax_amount=0, total_amount=order.total_amount,
                       customer_name="A", customer_email="a@example.com", company_name="X",
                       issue_date=issued, due_date=due))

    invoice(recent, "2024-0001", "PAID", now - timedelta(days=3), now + timedelta(days=27))
    invoice(old, "2024-0002", "PENDING", now - timedelta(days=20), now - timedelta(days=1))
    db.commit()

    dashboard = InvoiceService(db).get_dashboard("30d", now=now)

    assert dashboard["revenue"] == 130
    assert dashboard["order_count"] == 2
    assert dashboard["average_order_value"] == 65
    assert dashboard["invoiced"] == 150
    assert dashboard["paid"] == 100
    assert dashboard["outstanding"] == 50
    assert dashboard["overdue"] == 50
    assert dashboard["overdue_count"] == 1
    assert dashboard["paid_ratio"] == 66.7
    assert dashboard["monthly_revenue"] == [{"month": "2024-06", "revenue": 130, "orders": 2}]


def test_dashboard_rejects_unknown_timeframe(client):
    assert client.get("/api/finances/dashboard", params={"period": "2y"}).status_code == 422


def test_dashboard_endpoint(client, make_order):
    make_order(total=80)

    data = client.get("/api/finances/dashboard", params={"period": "7d"}).json()

    assert data["timeframe"] == "7d"
    assert data["revenue"] == 80
