"""Order domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.validators import validate_email
from .status import ORDER_STATUSES


class OrderItemCreate(BaseModel):
    product_id: int
    variant_id: Optional[int] = None
    quantity: int = Field(1, ge=1)
    unit_price: Optional[float] = Field(None, ge=0)  # Defaults to variant or product price


class OrderCreate(BaseModel):
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    items: list[OrderItemCreate]
    shipping_method_id: Optional[int] = None
    shipping_address: Optional[dict] = None
    tax_rate: Optional[float] = Field(None, ge=0, le=1)
    admin_notes: Optional[str] = None
    send_confirmation: bool = True

    @field_validator("customer_email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("items")
    @classmethod
    def check_items(cls, v):
        if not v:
            raise ValueError("An order needs at least one item")
        return v

    @model_validator(mode="after")
    def check_customer(self):
        if self.customer_id is None and not (self.customer_name and self.customer_email):
            raise ValueError("customer_id or customer_name and customer_email are required")
        return self


class OrderUpdate(BaseModel):
    admin_notes: Optional[str] = None
    tracking_number: Optional[str] = None
    carrier: Optional[str] = None
    estimated_delivery: Optional[str] = None
    shipping_address: Optional[dict] = None


class StatusUpdate(BaseModel):
    status: str
    notes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        if v not in ORDER_STATUSES:
            raise ValueError(f"Status must be one of {', '.join(ORDER_STATUSES)}")
        return v


class OrderItemResponse(BaseModel):
    id: int
    product_id: int
    variant_id: Optional[int] = None
    quantity: int
    unit_price: float
    total_price: float
    production_status: Optional[str] = None

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    order_number: str
    customer_id: Optional[int] = None
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    status: str
    subtotal: float
    tax_amount: float
    shipping_cost: float
    total_amount: float
    shipping_method: Optional[str] = None
    shipping_address: Optional[dict] = None
    tracking_number: Optional[str] = None
    carrier: Optional[str] = None
    estimated_delivery: Optional[str] = None
    admin_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    items: list[OrderItemResponse] = []

    class Config:
        from_attributes = True
