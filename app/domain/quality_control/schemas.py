"""Quality control schemas"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

CheckStatus = Literal["pending", "in_progress", "approved", "rejected", "needs_review"]
ItemStatus = Literal["pending", "passed", "failed", "not_applicable"]
Severity = Literal["minor", "major", "critical"]
DefectStatus = Literal["open", "in_progress", "resolved"]


class ChecklistItemData(BaseModel):
    category: Optional[str] = None
    description: str
    is_required: bool = True
    weight: int = Field(1, ge=1, le=10)
    criteria: list[str] = []


class TemplateCreate(BaseModel):
    name: str
    category: str
    description: Optional[str] = None
    items: list[ChecklistItemData]


class TemplateResponse(BaseModel):
    id: int
    name: str
    category: str
    description: Optional[str] = None
    items: list[ChecklistItemData] = []
    is_active: bool

    class Config:
        from_attributes = True


class CheckCreate(BaseModel):
    order_id: Optional[int] = None
    order_number: Optional[str] = None
    product_name: str
    category: Optional[str] = None
    customer: Optional[str] = None
    inspector: Optional[str] = None
    production_batch: Optional[str] = None
    estimated_minutes: Optional[int] = Field(None, ge=0)
    template_id: Optional[int] = None
    items: list[ChecklistItemData] = []

    @model_validator(mode="after")
    def check_source(self):
        if self.order_id is None and not self.order_number:
            raise ValueError("order_id or order_number is required")
        if self.template_id is None and not self.items:
            raise ValueError("Provide a template_id or checklist items")
        return self


class CheckUpdate(BaseModel):
    inspector: Optional[str] = None
    status: Optional[CheckStatus] = None
    comments: Optional[str] = None
    actual_minutes: Optional[int] = Field(None, ge=0)
    production_batch: Optional[str] = None


class ItemUpdate(BaseModel):
    status: ItemStatus
    notes: Optional[str] = None


class DefectCreate(BaseModel):
    type: str
    description: Optional[str] = None
    severity: Severity = "minor"
    location: Optional[str] = None
    correction_action: Optional[str] = None
    assigned_to: Optional[str] = None


class DefectUpdate(BaseModel):
    status: Optional[DefectStatus] = None
    severity: Optional[Severity] = None
    correction_action: Optional[str] = None
    assigned_to: Optional[str] = None


class ApproveRequest(BaseModel):
    approved_by: str
    comments: Optional[str] = None


class CheckItemResponse(BaseModel):
    id: int
    category: Optional[str] = None
    description: str
    is_required: bool
    status: str
    weight: int
    criteria: list[str] = []
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class DefectResponse(BaseModel):
    id: int
    type: str
    description: Optional[str] = None
    severity: str
    location: Optional[str] = None
    correction_action: Optional[str] = None
    status: str
    assigned_to: Optional[str] = None

    class Config:
        from_attributes = True


class CheckResponse(BaseModel):
    id: int
    order_id: Optional[int] = None
    order_number: str
    product_name: str
    category: Optional[str] = None
    customer: Optional[str] = None
    inspector: Optional[str] = None
    production_batch: Optional[str] = None
    status: str
    overall_score: int
    comments: Optional[str] = None
    estimated_minutes: Optional[int] = None
    actual_minutes: Optional[int] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    check_date: Optional[datetime] = None
    suggested_status: Optional[str] = None
    items: list[CheckItemResponse] = []
    defects: list[DefectResponse] = []

    class Config:
        from_attributes = True
