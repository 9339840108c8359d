"""Customer domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email, validate_phone


class AddressData(BaseModel):
    street: str
    city: str
    state: Optional[str] = None
    postal_code: str
    country: str = "España"
    is_default: bool = False


class CustomerCreate(BaseModel):
    """Schema for creating a new customer"""

    name: str
    email: str
    phone: Optional[str] = None
    acquisition_channel: Optional[str] = None
    notes: Optional[str] = None
    addresses: list[AddressData] = []
    send_welcome: bool = False

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        if v:
            return validate_phone(v)
        return v


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    acquisition_channel: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        if v:
            return validate_phone(v)
        return v


class CustomerProfileResponse(BaseModel):
    """Customer with CRM metrics"""

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    acquisition_channel: Optional[str] = None
    created_at: Optional[datetime] = None
    order_count: int
    total_spent: float
    average_order_value: float
    last_order_date: Optional[datetime] = None
    days_since_last_order: float
    segment: str
    risk_score: int
    lifetime_value: float

    class Config:
        from_attributes = True
