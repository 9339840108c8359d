"""Shipping method service"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Order, ShippingMethod
from .schemas import ShippingMethodCreate, ShippingMethodUpdate, ShippingQuote

logger = logging.getLogger(__name__)

BULK_ACTIONS = ("activate", "deactivate", "delete")


def shipping_cost_for(method: ShippingMethod, subtotal: float) -> float:
    """Method price, or 0 once the order reaches the free shipping threshold"""
    threshold = method.free_shipping_threshold
    if threshold is not None and subtotal >= threshold:
        return 0.0
    return float(method.price)


class ShippingService:
    def __init__(self, db: Session):
        self.db = db

    def list_methods(
        self, include_inactive: bool = False, is_active: Optional[bool] = None
    ) -> list[ShippingMethod]:
        query = self.db.query(ShippingMethod)
        if not include_inactive:
            query = query.filter(ShippingMethod.is_active.is_(True))
        elif is_active is not None:
            query = query.filter(ShippingMethod.is_active.is_(is_active))

        return query.order_by(
            ShippingMethod.is_active.desc(), ShippingMethod.price.asc(), ShippingMethod.name.asc()
        ).all()

    def get_method(self, method_id: int) -> ShippingMethod:
        method = self.db.query(ShippingMethod).filter(ShippingMethod.id == method_id).first()
        if not method:
            raise HTTPException(status_code=404, detail="Shipping method not found")
        return method

    def _ensure_unique_name(self, name: str, exclude_id: Optional[int] = None) -> None:
        query = self.db.query(ShippingMethod).filter(ShippingMethod.name == name)
        if exclude_id is not None:
            query = query.filter(ShippingMethod.id != exclude_id)
        if query.first():
            raise HTTPException(
                status_code=400, detail="A shipping method with that name already exists"
            )

    def _orders_using(self, methods: list[ShippingMethod]) -> int:
        names = [m.name for m in methods]
        if not names:
            return 0
        return self.db.query(Order).filter(Order.shipping_method.in_(names)).count()

    def create_method(self, data: ShippingMethodCreate) -> ShippingMethod:
        self._ensure_unique_name(data.name)
        method = ShippingMethod(**data.model_dump())
        self.db.add(method)
        self.db.commit()
        self.db.refresh(method)
        logger.info(f"✅ Created shipping method {method.name}")
        return method

    def update_method(self, method_id: int, data: ShippingMethodUpdate) -> ShippingMethod:
        method = self.get_method(method_id)
        updates = data.model_dump(exclude_unset=True)
        if updates.get("name") and updates["name"] != method.name:
            self._ensure_unique_name(updates["name"], exclude_id=method_id)
            # Orders reference the method by name
            if self._orders_using([method]):
                raise HTTPException(
                    status_code=400, detail="Cannot rename a shipping method used by orders"
                )
        for key, value in updates.items():
            setattr(method, key, value)
        self.db.commit()
        self.db.refresh(method)
        return method

    def delete_method(self, method_id: int) -> None:
        method = self.get_method(method_id)
        if self._orders_using([method]):
            raise HTTPException(
                status_code=400, detail="Cannot delete a shipping method used by orders"
            )
        self.db.delete(method)
        self.db.commit()

    def bulk_action(self, action: str, method_ids: list[int]) -> int:
        if action not in BULK_ACTIONS:
            raise HTTPException(status_code=400, detail="Invalid action")
        if not method_ids:
            raise HTTPException(status_code=400, detail="Action and method ids are required")

        methods = self.db.query(ShippingMethod).filter(ShippingMethod.id.in_(method_ids)).all()

        if action == "delete":
            if self._orders_using(methods):
                raise HTTPException(
                    status_code=400,
                    detail="Cannot delete shipping methods that have associated orders",
                )
            for method in methods:
                self.db.delete(method)
        else:
            for method in methods:
                method.is_active = action == "activate"

        self.db.commit()
        logger.info(f"🔄 Bulk '{action}' applied to {len(methods)} shipping method(s)")
        return len(methods)

    def quote(self, subtotal: float) -> list[ShippingQuote]:
        return [
            ShippingQuote(
                method_id=method.id,
                name=method.name,
                cost=shipping_cost_for(method, subtotal),
                estimated_days=method.estimated_days,
                free_shipping=shipping_cost_for(method, subtotal) == 0,
            )
            for method in self.list_methods()
        ]
