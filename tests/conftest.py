"""
Pytest fixtures shared by the storefront admin tests.

Every test runs against a fresh in-memory SQLite database, and SMTP is mocked so no
email ever leaves the machine.
"""

import os

# Must be configured before the app modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECURITY_HEADERS_ENABLED"] = "true"
for key in ("EMAIL_SERVER_HOST", "EMAIL_SERVER_PORT", "EMAIL_SERVER_USER", "EMAIL_SERVER_PASSWORD"):
    os.environ.pop(key, None)

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app import email_service as email_module  # noqa: E402
from app.database import Base, SessionLocal, engine  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Customer, Order, OrderItem, Product, ProductVariant, ShippingMethod  # noqa: E402
from app.settings_store import set_settings  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    """Recreate every table for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    email_module.email_service.reset_transporter()
    yield
    email_module.email_service.reset_transporter()


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    """Create a test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def mock_smtp(mocker):
    """Mock the plain SMTP connection used with STARTTLS."""
    smtp_mock = mocker.MagicMock()
    smtp_mock.has_extn.return_value = True
    mocker.patch("app.email_service.smtplib.SMTP", return_value=smtp_mock)
    return smtp_mock


@pytest.fixture
def smtp_settings(db):
    """Store a working SMTP configuration in the settings table."""
    set_settings(
        db,
        {
            "smtp_host": "smtp.example.com",
            "smtp_port": "587",
            "smtp_secure": "false",
            "smtp_user": "mailer",
            "smtp_password": "secret",
            "from_email": "shop@example.com",
            "from_name": "Example Shop",
        },
    )


@pytest.fixture
def sent_emails(mocker):
    """Capture send_email calls on the shared email service instead of sending."""
    return mocker.patch.object(email_module.email_service, "send_email", return_value=True)


@pytest.fixture
def make_customer(db):
    def factory(name="Ana García", email="ana@example.com", created_at=None, **kwargs):
        customer = Customer(
            name=name, email=email, created_at=created_at or datetime.utcnow(), **kwargs
        )
        db.add(customer)
        db.commit()
        db.refresh(customer)
        return customer

    return factory


@pytest.fixture
def make_product(db):
    def factory(name="Camiseta", slug="camiseta", base_price=20.0, **kwargs):
        product = Product(name=name, slug=slug, base_price=base_price, **kwargs)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return factory


@pytest.fixture
def make_variant(db):
    def factory(product, sku="camiseta-m", stock=10, price=22.0, **kwargs):
        variant = ProductVariant(
            product_id=product.id,
            sku=sku,
            display_name=kwargs.pop("display_name", sku),
            stock=stock,
            price=price,
            **kwargs,
        )
        db.add(variant)
        db.commit()
        db.refresh(variant)
        return variant

    return factory


@pytest.fixture
def make_shipping_method(db):
    def factory(name="Standard", price=4.95, **kwargs):
        method = ShippingMethod(name=name, price=price, **kwargs)
        db.add(method)
        db.commit()
        db.refresh(method)
        return method

    return factory


@pytest.fixture
def make_order(db):
    """Insert an order directly, bypassing stock and numbering rules."""
    counter = {"n": 0}

    def factory(customer=None, total=100.0, status="DELIVERED", created_at=None, product=None,
                quantity=1, tax_amount=0.0, **kwargs):
        counter["n"] += 1
        order = Order(
            order_number=kwargs.pop("order_number", f"TEST-{counter['n']:03d}"),
            customer_id=customer.id if customer else None,
            customer_name=customer.name if customer else "Guest",
            customer_email=customer.email if customer else "guest@example.com",
            status=status,
            subtotal=total - tax_amount,
            tax_amount=tax_amount,
            total_amount=total,
            created_at=created_at or datetime.utcnow(),
            **kwargs,
        )
        if product is not None:
            order.items = [
                OrderItem(
                    product_id=product.id,
                    quantity=quantity,
                    unit_price=round(total / quantity, 2),
                    total_price=total,
                )
            ]
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    return factory
