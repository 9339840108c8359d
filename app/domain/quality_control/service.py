"""Quality control service - inspections, defects and quality statistics"""

import logging
from collections import Counter, defaultdict
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from ...models import Order
from ...models_quality import QualityCheck, QualityCheckItem, QualityDefect, QualityTemplate
from .schemas import (
    ApproveRequest,
    CheckCreate,
    CheckResponse,
    CheckUpdate,
    DefectCreate,
    DefectUpdate,
    ItemUpdate,
    TemplateCreate,
)
from .scoring import compute_score, suggest_status

logger = logging.getLogger(__name__)

COMPLETED_STATUSES = ("approved", "rejected", "needs_review")

DEFAULT_TEMPLATES = [
    {
        "name": "Textile - Printed T-Shirt",
        "category": "Textile",
        "description": "Checklist for printed and vinyl textile products",
        "items": [
            {"category": "Material", "description": "Fabric free of stains, holes and loose threads", "is_required": True, "weight": 3},
            {"category": "Print", "description": "Design position and alignment match the proof", "is_required": True, "weight": 3},
            {"category": "Print", "description": "Colours match the approved design", "is_required": True, "weight": 2},
            {"category": "Seams", "description": "Seams straight and finished", "is_required": False, "weight": 1},
            {"category": "Sizing", "description": "Size label matches the order", "is_required": True, "weight": 2},
        ],
    },
    {
        "name": "General Product",
        "category": "General",
        "description": "Basic checklist for any custom product",
        "items": [
            {"category": "Appearance", "description": "No visible damage or scratches", "is_required": True, "weight": 2},
            {"category": "Specifications", "description": "Personalisation text and design as ordered", "is_required": True, "weight": 3},
            {"category": "Packaging", "description": "Packed and protected for shipping", "is_required": False, "weight": 1},
        ],
    },
]


def to_response(check: QualityCheck) -> CheckResponse:
    response = CheckResponse.model_validate(check)
    return response.model_copy(update={"suggested_status": suggest_status(check.items, check.defects)})


class QualityControlService:
    def __init__(self, db: Session):
        self.db = db

    # Templates

    def list_templates(self, category: Optional[str] = None) -> list[QualityTemplate]:
        if not self.db.query(QualityTemplate).count():
            for data in DEFAULT_TEMPLATES:
                self.db.add(QualityTemplate(**data))
            self.db.commit()
            logger.info("✅ Seeded default quality templates")

        query = self.db.query(QualityTemplate).filter(QualityTemplate.is_active.is_(True))
        if category:
            query = query.filter(QualityTemplate.category == category)
        return query.order_by(QualityTemplate.name.asc()).all()

    def create_template(self, data: TemplateCreate) -> QualityTemplate:
        template = QualityTemplate(
            name=data.name,
            category=data.category,
            description=data.description,
            items=[item.model_dump() for item in data.items],
        )
        self.db.add(template)
        self.db.commit()
        self.db.refresh(template)
        return template

    # Checks

    def list_checks(
        self,
        status: Optional[str] = None,
        inspector: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[QualityCheck]:
        query = self.db.query(QualityCheck).options(
            selectinload(QualityCheck.items), selectinload(QualityCheck.defects)
        )
        if status and status != "all":
            query = query.filter(QualityCheck.status == status)
        if inspector:
            query = query.filter(QualityCheck.inspector == inspector)
        if search:
            term = f"%{search}%"
            query = query.filter(
                or_(
                    QualityCheck.order_number.ilike(term),
                    QualityCheck.product_name.ilike(term),
                    QualityCheck.customer.ilike(term),
                )
            )
        return query.order_by(QualityCheck.check_date.desc(), QualityCheck.id.desc()).all()

    def get_check(self, check_id: int) -> QualityCheck:
        check = self.db.query(QualityCheck).filter(QualityCheck.id == check_id).first()
        if not check:
            raise HTTPException(status_code=404, detail="Quality check not found")
        return check

    def create_check(self, data: CheckCreate) -> QualityCheck:
        order_number = data.order_number
        customer = data.customer
        if data.order_id is not None:
            order = self.db.query(Order).filter(Order.id == data.order_id).first()
            if not order:
                raise HTTPException(status_code=404, detail="Order not found")
            order_number = order.order_number
            customer = customer or order.customer_name

        items = [item.model_dump() for item in data.items]
        category = data.category
        if data.template_id is not None:
            template = (
                self.db.query(QualityTemplate).filter(QualityTemplate.id == data.template_id).first()
            )
            if not template:
                raise HTTPException(status_code=404, detail="Quality template not found")
            items = list(template.items or []) + items
            category = category or template.category

        check = QualityCheck(
            order_id=data.order_id,
            order_number=order_number,
            product_name=data.product_name,
            category=category,
            customer=customer,
            inspector=data.inspector,
            production_batch=data.production_batch,
            estimated_minutes=data.estimated_minutes,
            status="pending",
            overall_score=0,
            check_date=datetime.utcnow(),
        )
        check.items = [
            QualityCheckItem(
                category=item.get("category"),
                description=item["description"],
                is_required=item.get("is_required", True),
                weight=item.get("weight", 1),
                criteria=item.get("criteria", []),
                status="pending",
            )
            for item in items
        ]
        self.db.add(check)
        self.db.commit()
        self.db.refresh(check)
        logger.info(f"✅ Quality check {check.id} created for order {order_number}")
        return check

    def _recalculate(self, check: QualityCheck) -> None:
        check.overall_score = compute_score(check.items)
        # Decisions already taken by an inspector stay until the checklist changes them
        if check.status != "approved":
            check.status = suggest_status(check.items, check.defects)

    def update_check(self, check_id: int, data: CheckUpdate) -> QualityCheck:
        check = self.get_check(check_id)
        updates = data.model_dump(exclude_unset=True)
        if updates.get("status") == "approved":
            raise HTTPException(status_code=400, detail="Use the approve endpoint to approve a check")
        for key, value in updates.items():
            setattr(check, key, value)
        self.db.commit()
        self.db.refresh(check)
        return check

    def update_item(self, check_id: int, item_id: int, data: ItemUpdate) -> QualityCheck:
        check = self.get_check(check_id)
        item = next((i for i in check.items if i.id == item_id), None)
        if not item:
            raise HTTPException(status_code=404, detail="Checklist item not found")

        item.status = data.status
        if data.notes is not None:
            item.notes = data.notes
        if check.status == "approved" and data.status == "failed":
            check.status = "needs_review"
            check.approved_by = None
            check.approved_at = None
        self._recalculate(check)

        self.db.commit()
        self.db.refresh(check)
        return check

    def add_defect(self, check_id: int, data: DefectCreate) -> QualityCheck:
        check = self.get_check(check_id)
        check.defects.append(QualityDefect(**data.model_dump(), status="open"))
        if check.status == "approved":
            check.status = "needs_review"
            check.approved_by = None
            check.approved_at = None
        self._recalculate(check)

        self.db.commit()
        self.db.refresh(check)
        logger.warning(f"⚠️ {data.severity} defect '{data.type}' logged on check {check_id}")
        return check

    def update_defect(self, check_id: int, defect_id: int, data: DefectUpdate) -> QualityCheck:
        check = self.get_check(check_id)
        defect = next((d for d in check.defects if d.id == defect_id), None)
        if not defect:
            raise HTTPException(status_code=404, detail="Defect not found")

        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(defect, key, value)
        self._recalculate(check)

        self.db.commit()
        self.db.refresh(check)
        return check

    def approve_check(self, check_id: int, data: ApproveRequest) -> QualityCheck:
        check = self.get_check(check_id)
        suggestion = suggest_status(check.items, check.defects)
        if suggestion in ("pending", "in_progress"):
            raise HTTPException(status_code=400, detail="Every checklist item must be evaluated first")
        if suggestion == "rejected":
            raise HTTPException(
                status_code=400,
                detail="Failed required items or open critical defects prevent approval",
            )

        check.status = "approved"
        check.approved_by = data.approved_by
        check.approved_at = datetime.utcnow()
        if data.comments:
            check.comments = data.comments
        check.overall_score = compute_score(check.items)

        self.db.commit()
        self.db.refresh(check)
        logger.info(f"✅ Quality check {check_id} approved by {data.approved_by}")
        return check

    # Stats

    def get_stats(self) -> dict:
        checks = self.list_checks()
        completed = [c for c in checks if c.status in COMPLETED_STATUSES]
        approved = [c for c in completed if c.status == "approved"]
        timed = [c.actual_minutes for c in checks if c.actual_minutes is not None]

        def pass_rate(group: list[QualityCheck]) -> float:
            done = [c for c in group if c.status in COMPLETED_STATUSES]
            if not done:
                return 0
            return round(sum(1 for c in done if c.status == "approved") / len(done) * 100, 1)

        def average_score(group: list[QualityCheck]) -> float:
            done = [c for c in group if c.status in COMPLETED_STATUSES]
            return round(sum(c.overall_score for c in done) / len(done), 1) if done else 0

        defect_types = Counter(d.type for c in checks for d in c.defects)

        by_inspector: dict[str, list] = defaultdict(list)
        by_category: dict[str, list] = defaultdict(list)
        by_month: dict[str, list] = defaultdict(list)
        for c in checks:
            by_inspector[c.inspector or "Unassigned"].append(c)
            by_category[c.category or "Uncategorised"].append(c)
            if c.check_date:
                by_month[c.check_date.strftime("%Y-%m")].append(c)

        return {
            "total_checks": len(checks),
            "by_status": {
                status: sum(1 for c in checks if c.status == status)
                for status in ("pending", "in_progress", "approved", "rejected", "needs_review")
            },
            "pass_rate": round(len(approved) / len(completed) * 100, 1) if completed else 0,
            "average_score": average_score(checks),
            "defect_rate": (
                round(sum(1 for c in checks if c.defects) / len(checks) * 100, 1) if checks else 0
            ),
            "average_check_time": round(sum(timed) / len(timed), 1) if timed else 0,
            "top_defects": [
                {"type": defect_type, "count": count}
                for defect_type, count in defect_types.most_common(5)
            ],
            "inspector_performance": [
                {"name": name, "checks": len(group), "pass_rate": pass_rate(group)}
                for name, group in sorted(by_inspector.items())
            ],
            "category_performance": [
                {
                    "category": category,
                    "checks": len(group),
                    "pass_rate": pass_rate(group),
                    "average_score": average_score(group),
                }
                for category, group in sorted(by_category.items())
            ],
            "monthly_trends": [
                {
                    "month": month,
                    "checks": len(group),
                    "pass_rate": pass_rate(group),
                    "average_score": average_score(group),
                }
                for month, group in sorted(by_month.items())[-6:]
            ],
        }
