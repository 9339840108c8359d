"""
Payment gateway configuration models
"""

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String
from sqlalchemy.sql import func

from .database import Base


class PaymentGateway(Base):
    """A configured payment provider (Stripe, PayPal, Redsys...)"""

    __tablename__ = "payment_gateways"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    # stripe, paypal, redsys, bizum, apple_pay, google_pay, klarna, afterpay
    provider = Column(String(30), nullable=False)
    is_enabled = Column(Boolean, default=False)
    is_live = Column(Boolean, default=False)

    # Credentials
    public_key = Column(String(255), nullable=True)
    secret_key = Column(String(500), nullable=True)
    webhook_secret = Column(String(500), nullable=True)
    merchant_id = Column(String(100), nullable=True)
    environment = Column(String(20), default="sandbox")  # sandbox, production

    # Fees
    fixed_fee = Column(Float, default=0)
    percentage_fee = Column(Float, default=0)
    fee_currency = Column(String(10), default="EUR")

    supported_currencies = Column(JSON, default=list)
    supported_countries = Column(JSON, default=list)
    # {"recurring_payments": bool, "refunds": bool, "disputes": bool, "webhooks": bool, "three_d_secure": bool}
    features = Column(JSON, default=dict)

    # Limits
    min_amount = Column(Float, default=0)
    max_amount = Column(Float, nullable=True)
    daily_limit = Column(Float, nullable=True)
    monthly_limit = Column(Float, nullable=True)

    status = Column(String(20), default="testing")  # active, inactive, error, testing
    last_sync = Column(DateTime, nullable=True)
    last_test_result = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
