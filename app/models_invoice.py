"""
Invoice model for order billing
"""

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Invoice(Base):
    """Invoice issued for a single order"""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, unique=True)

    # Invoice details
    invoice_number = Column(String(20), unique=True, nullable=False, index=True)  # YYYY-NNNN
    status = Column(String(20), default="PENDING")  # PENDING, PAID, OVERDUE, CANCELLED

    # Pricing
    subtotal = Column(Float, nullable=False)
    tax_rate = Column(Float, nullable=False)
    tax_amount = Column(Float, nullable=False)
    total_amount = Column(Float, nullable=False)
    currency = Column(String(10), default="EUR")

    # Customer snapshot
    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=True)
    billing_address = Column(JSON, nullable=True)

    # Company snapshot
    company_name = Column(String(255), nullable=False)
    company_address = Column(JSON, nullable=True)
    company_tax_id = Column(String(50), nullable=True)
    company_phone = Column(String(50), nullable=True)
    company_email = Column(String(255), nullable=True)

    # [{"product_name", "variant_name", "quantity", "unit_price", "total_price"}]
    line_items = Column(JSON, default=list)
    payment_terms = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    # Dates
    issue_date = Column(DateTime, server_default=func.now())
    due_date = Column(DateTime, nullable=True)
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    order = relationship("Order", back_populates="invoice")
