"""Product domain schemas"""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_hex_color


class VariantOption(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    value: str
    color_hex: Optional[str] = None

    @field_validator("color_hex")
    @classmethod
    def check_color(cls, v):
        return validate_hex_color(v)

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        if not v.strip():
            raise ValueError("Option name is required")
        return v.strip()


class VariantGroup(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    type: Literal["size", "color", "custom"] = "custom"
    options: list[VariantOption] = []

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        if not v.strip():
            raise ValueError("Group name is required")
        return v.strip()


class ProductCreate(BaseModel):
    name: str
    slug: str
    description: Optional[str] = None
    category: Optional[str] = None
    base_price: float = Field(0, ge=0)
    is_active: bool = True
    variant_groups: list[VariantGroup] = []


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    base_price: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None
    variant_groups: Optional[list[VariantGroup]] = None


class ProductResponse(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    category: Optional[str] = None
    base_price: float
    is_active: bool
    variant_groups: list[VariantGroup] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GenerateVariantsRequest(BaseModel):
    """Groups to combine; the product's saved groups are used when omitted"""

    groups: Optional[list[VariantGroup]] = None
    base_price: Optional[float] = Field(None, ge=0)


class CombinationResponse(BaseModel):
    id: str
    group_combinations: list[dict]
    sku: str
    stock: int
    price: float
    is_active: bool
    display_name: str

    class Config:
        from_attributes = True


class ProductVariantResponse(BaseModel):
    id: int
    product_id: int
    sku: str
    display_name: str
    group_combinations: list[dict] = []
    stock: int
    price: float
    is_active: bool

    class Config:
        from_attributes = True


class ProductVariantUpdate(BaseModel):
    sku: Optional[str] = None
    display_name: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None
