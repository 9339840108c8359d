"""Order service - order creation, status workflow and stock"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import DEFAULT_TAX_RATE
from ...models import Customer, Order, OrderItem, Product, ProductVariant, ShippingMethod
from ...shared.listing import paginate
from ...shared.validators import parse_date_param, parse_end_date_param
from ..shipping.service import shipping_cost_for
from .repository import OrderRepository
from .schemas import OrderCreate, OrderUpdate
from .status import (
    ORDER_STATUSES,
    allowed_transitions,
    calculate_order_total,
    generate_order_number,
    is_valid_status_transition,
)

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "created_at": Order.created_at,
    "total_amount": Order.total_amount,
    "order_number": Order.order_number,
    "customer_name": Order.customer_name,
    "status": Order.status,
}


class OrderService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepository()

    def list_orders(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[Order], dict]:
        column = SORT_COLUMNS.get(sort_by)
        if column is None:
            raise HTTPException(status_code=400, detail=f"Cannot sort by {sort_by}")

        query = self.repo.search_orders(
            self.db, status, search, parse_date_param(start_date), parse_end_date_param(end_date)
        )
        query = query.order_by(column.asc() if sort_order == "asc" else column.desc())
        return paginate(query, page, limit)

    def get_order(self, order_id: int) -> Order:
        order = self.repo.get_order_by_id(self.db, order_id)
        if not order:
            raise HTTPException(status_code=404, detail="Order not found")
        return order

    def _reserve_stock(self, variant: ProductVariant, quantity: int) -> None:
        if variant.stock - quantity < 0:
            raise HTTPException(status_code=400, detail=f"Insufficient stock for {variant.sku}")
        variant.stock -= quantity

    def _release_stock(self, order: Order) -> None:
        for item in order.items:
            if item.variant:
                item.variant.stock += item.quantity
                logger.info(f"📦 Released {item.quantity} units of {item.variant.sku}")

    def create_order(self, data: OrderCreate) -> Order:
        customer = None
        if data.customer_id is not None:
            customer = self.db.query(Customer).filter(Customer.id == data.customer_id).first()
            if not customer:
                raise HTTPException(status_code=404, detail="Customer not found")

        lines = []
        for item in data.items:
            product = self.db.query(Product).filter(Product.id == item.product_id).first()
            if not product:
                raise HTTPException(status_code=404, detail=f"Product {item.product_id} not found")

            variant = None
            if item.variant_id is not None:
                variant = (
                    self.db.query(ProductVariant)
                    .filter(
                        ProductVariant.id == item.variant_id,
                        ProductVariant.product_id == product.id,
                    )
                    .first()
                )
                if not variant:
                    raise HTTPException(
                        status_code=404, detail=f"Variant {item.variant_id} not found"
                    )
                self._reserve_stock(variant, item.quantity)

            unit_price = item.unit_price
            if unit_price is None:
                unit_price = variant.price if variant else product.base_price
            lines.append(
                {"product": product, "variant": variant, "quantity": item.quantity, "unit_price": unit_price}
            )

        subtotal = sum(line["unit_price"] * line["quantity"] for line in lines)
        shipping_method = None
        shipping_cost = 0.0
        if data.shipping_method_id is not None:
            shipping_method = (
                self.db.query(ShippingMethod)
                .filter(ShippingMethod.id == data.shipping_method_id, ShippingMethod.is_active.is_(True))
                .first()
            )
            if not shipping_method:
                raise HTTPException(status_code=400, detail="Shipping method not available")
            shipping_cost = shipping_cost_for(shipping_method, subtotal)

        tax_rate = DEFAULT_TAX_RATE if data.tax_rate is None else data.tax_rate
        totals = calculate_order_total(lines, shipping_cost, tax_rate)

        now = datetime.utcnow()
        order = Order(
            order_number=generate_order_number(self.db, now),
            customer_id=customer.id if customer else None,
            customer_name=data.customer_name or customer.name,
            customer_email=data.customer_email or customer.email,
            customer_phone=data.customer_phone or (customer.phone if customer else None),
            status="PENDING",
            subtotal=round(totals["subtotal"], 2),
            tax_amount=round(totals["tax_amount"], 2),
            shipping_cost=round(totals["shipping_cost"], 2),
            total_amount=round(totals["total_amount"], 2),
            shipping_method=shipping_method.name if shipping_method else None,
            shipping_address=data.shipping_address,
            admin_notes=data.admin_notes,
            created_at=now,
        )
        order.items = [
            OrderItem(
                product_id=line["product"].id,
                variant_id=line["variant"].id if line["variant"] else None,
                quantity=line["quantity"],
                unit_price=line["unit_price"],
                total_price=round(line["unit_price"] * line["quantity"], 2),
            )
            for line in lines
        ]
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        logger.info(f"✅ Created order {order.order_number} ({order.total_amount:.2f} EUR)")
        return order

    def update_order(self, order_id: int, data: OrderUpdate) -> Order:
        order = self.get_order(order_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(order, key, value)
        self.db.commit()
        self.db.refresh(order)
        return order

    def get_status_options(self, order_id: int) -> dict:
        order = self.get_order(order_id)
        return {
            "current_status": order.status,
            "allowed_statuses": list(allowed_transitions(order.status)),
            "order": {"id": order.id, "order_number": order.order_number, "status": order.status},
        }

    def update_status(self, order_id: int, new_status: str, notes: Optional[str] = None) -> Order:
        order = self.get_order(order_id)

        if not is_valid_status_transition(order.status, new_status):
            raise HTTPException(
                status_code=400, detail=f"Cannot change status from {order.status} to {new_status}"
            )

        if new_status == "CANCELLED":
            self._release_stock(order)

        previous = order.status
        order.status = new_status
        if notes:
            order.admin_notes = notes
        if new_status == "SHIPPED" and not order.tracking_number:
            order.tracking_number = f"TRK-{order.order_number}"

        self.db.commit()
        self.db.refresh(order)
        logger.info(f"🔄 Order {order.order_number}: {previous} -> {new_status}")
        return order

    def get_stats(self) -> dict:
        counts = self.repo.count_by_status(self.db)
        revenue, paid_orders = self.repo.revenue_summary(self.db)
        return {
            "total_orders": sum(counts.values()),
            "by_status": {status: counts.get(status, 0) for status in ORDER_STATUSES},
            "total_revenue": round(revenue, 2),
            "average_order_value": round(revenue / paid_orders, 2) if paid_orders else 0,
        }
