"""
Quality control models: checklist-based inspections of produced items
"""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class QualityTemplate(Base):
    """Reusable checklist for a product category"""

    __tablename__ = "quality_templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    # [{"category", "description", "is_required", "weight", "criteria": [...]}]
    items = Column(JSON, default=list)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())


class QualityCheck(Base):
    __tablename__ = "quality_checks"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)
    order_number = Column(String(30), nullable=False)
    product_name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True)
    customer = Column(String(255), nullable=True)
    inspector = Column(String(255), nullable=True)
    production_batch = Column(String(100), nullable=True)
    # pending, in_progress, approved, rejected, needs_review
    status = Column(String(20), default="pending", nullable=False, index=True)
    overall_score = Column(Integer, default=0)
    comments = Column(Text, nullable=True)
    estimated_minutes = Column(Integer, nullable=True)
    actual_minutes = Column(Integer, nullable=True)
    approved_by = Column(String(255), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    check_date = Column(DateTime, server_default=func.now())

    items = relationship("QualityCheckItem", back_populates="check", cascade="all, delete-orphan")
    defects = relationship("QualityDefect", back_populates="check", cascade="all, delete-orphan")


class QualityCheckItem(Base):
    __tablename__ = "quality_check_items"

    id = Column(Integer, primary_key=True, index=True)
    check_id = Column(Integer, ForeignKey("quality_checks.id"), nullable=False)
    category = Column(String(100), nullable=True)
    description = Column(String(500), nullable=False)
    is_required = Column(Boolean, default=True)
    status = Column(String(20), default="pending")  # pending, passed, failed, not_applicable
    weight = Column(Integer, default=1)
    criteria = Column(JSON, default=list)
    notes = Column(Text, nullable=True)

    check = relationship("QualityCheck", back_populates="items")


class QualityDefect(Base):
    __tablename__ = "quality_defects"

    id = Column(Integer, primary_key=True, index=True)
    check_id = Column(Integer, ForeignKey("quality_checks.id"), nullable=False)
    type = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    severity = Column(String(20), default="minor")  # minor, major, critical
    location = Column(String(255), nullable=True)
    correction_action = Column(Text, nullable=True)
    status = Column(String(20), default="open")  # open, in_progress, resolved
    assigned_to = Column(String(255), nullable=True)

    check = relationship("QualityCheck", back_populates="defects")
