"""Shipping method schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ShippingMethodCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    is_active: bool = True
    estimated_days: Optional[str] = None
    free_shipping_threshold: Optional[float] = Field(None, ge=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class ShippingMethodUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None
    estimated_days: Optional[str] = None
    free_shipping_threshold: Optional[float] = Field(None, ge=0)


class BulkShippingAction(BaseModel):
    action: str
    method_ids: list[int]


class ShippingMethodResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    is_active: bool
    estimated_days: Optional[str] = None
    free_shipping_threshold: Optional[float] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ShippingQuote(BaseModel):
    method_id: int
    name: str
    cost: float
    estimated_days: Optional[str] = None
    free_shipping: bool
