"""Invoice schemas"""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel

InvoiceStatus = Literal["PENDING", "PAID", "OVERDUE", "CANCELLED"]


class InvoiceCreate(BaseModel):
    order_id: int
    notes: Optional[str] = None
    payment_terms: Optional[str] = None


class InvoiceUpdate(BaseModel):
    status: Optional[InvoiceStatus] = None
    notes: Optional[str] = None
    payment_terms: Optional[str] = None
    paid_at: Optional[datetime] = None


class LineItem(BaseModel):
    product_name: str
    variant_name: Optional[str] = None
    quantity: int
    unit_price: float
    total_price: float


class InvoiceResponse(BaseModel):
    id: int
    order_id: int
    order_number: Optional[str] = None
    invoice_number: str
    status: str
    subtotal: float
    tax_rate: float
    tax_amount: float
    total_amount: float
    currency: str
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    billing_address: Optional[dict[str, Any]] = None
    company_name: str
    company_address: Optional[dict[str, Any]] = None
    company_tax_id: Optional[str] = None
    company_phone: Optional[str] = None
    company_email: Optional[str] = None
    line_items: list[LineItem] = []
    payment_terms: Optional[str] = None
    notes: Optional[str] = None
    issue_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    class Config:
        from_attributes = True
