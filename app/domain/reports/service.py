"""Sales report service"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Customer, Order, OrderItem, Product
from ...shared.exports import csv_response
from ...shared.validators import parse_date_param, parse_end_date_param

logger = logging.getLogger(__name__)

TOP_LIMIT = 10


def resolve_range(
    period: int = 30,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    now: Optional[datetime] = None,
) -> tuple[datetime, datetime]:
    """Explicit start/end win over the rolling period of days"""
    if start_date and end_date:
        start = parse_date_param(start_date)
        end = parse_end_date_param(end_date)
        if start is None or end is None:
            raise HTTPException(status_code=400, detail="Invalid date range")
        if start > end:
            raise HTTPException(status_code=400, detail="start_date must be before end_date")
        return start, end

    now = now or datetime.utcnow()
    return now - timedelta(days=period), now


class ReportService:
    def __init__(self, db: Session):
        self.db = db

    def _orders(self, start: datetime, end: datetime, include_cancelled: bool = False):
        query = self.db.query(Order).filter(Order.created_at >= start, Order.created_at <= end)
        if not include_cancelled:
            query = query.filter(Order.status != "CANCELLED")
        return query

    def daily_sales(self, start: datetime, end: datetime) -> list[dict]:
        days: dict[str, dict] = defaultdict(lambda: {"total_amount": 0.0, "order_count": 0})
        for order in self._orders(start, end).all():
            day = days[order.created_at.strftime("%Y-%m-%d")]
            day["total_amount"] += order.total_amount or 0
            day["order_count"] += 1
        return [
            {"date": date, "total_amount": round(v["total_amount"], 2), "order_count": v["order_count"]}
            for date, v in sorted(days.items())
        ]

    def sales_report(
        self,
        period: int = 30,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> dict:
        start, end = resolve_range(period, start_date, end_date)

        total, count = (
            self._orders(start, end)
            .with_entities(func.coalesce(func.sum(Order.total_amount), 0), func.count(Order.id))
            .one()
        )
        total = float(total or 0)

        by_status = (
            self._orders(start, end, include_cancelled=True)
            .with_entities(Order.status, func.coalesce(func.sum(Order.total_amount), 0), func.count(Order.id))
            .group_by(Order.status)
            .all()
        )

        quantity = func.sum(OrderItem.quantity)
        top_products = (
            self.db.query(
                Product.id,
                Product.name,
                quantity.label("quantity"),
                func.sum(OrderItem.total_price).label("revenue"),
                func.count(OrderItem.id).label("order_lines"),
            )
            .join(OrderItem, OrderItem.product_id == Product.id)
            .join(Order, Order.id == OrderItem.order_id)
            .filter(Order.status != "CANCELLED", Order.created_at >= start, Order.created_at <= end)
            .group_by(Product.id, Product.name)
            .order_by(quantity.desc())
            .limit(TOP_LIMIT)
            .all()
        )

        spent = func.sum(Order.total_amount)
        top_customers = (
            self.db.query(
                Customer.id,
                Customer.name,
                Customer.email,
                spent.label("total_amount"),
                func.count(Order.id).label("order_count"),
            )
            .join(Order, Order.customer_id == Customer.id)
            .filter(Order.status != "CANCELLED", Order.created_at >= start, Order.created_at <= end)
            .group_by(Customer.id, Customer.name, Customer.email)
            .order_by(spent.desc())
            .limit(TOP_LIMIT)
            .all()
        )

        logger.info(f"📊 Sales report {start:%Y-%m-%d} to {end:%Y-%m-%d}: {count} orders")

        return {
            "summary": {
                "total_revenue": round(total, 2),
                "total_orders": int(count or 0),
                "average_order_value": round(total / count, 2) if count else 0,
            },
            "daily_sales": self.daily_sales(start, end),
            "sales_by_status": [
                {"status": status, "total_amount": round(float(amount), 2), "order_count": orders}
                for status, amount, orders in by_status
            ],
            "top_products": [
                {
                    "product_id": row.id,
                    "name": row.name,
                    "quantity": int(row.quantity or 0),
                    "revenue": round(float(row.revenue or 0), 2),
                    "order_lines": row.order_lines,
                }
                for row in top_products
            ],
            "top_customers": [
                {
                    "customer_id": row.id,
                    "name": row.name,
                    "email": row.email,
                    "total_amount": round(float(row.total_amount or 0), 2),
                    "order_count": row.order_count,
                }
                for row in top_customers
            ],
            "period": {"start": start.isoformat(), "end": end.isoformat()},
        }

    def export_sales(
        self,
        period: int = 30,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ):
        start, end = resolve_range(period, start_date, end_date)
        try:
            rows = [
                [day["date"], day["order_count"], f"{day['total_amount']:.2f}"]
                for day in self.daily_sales(start, end)
            ]
            return csv_response("sales", ["Date", "Orders", "Revenue"], rows)
        except Exception as e:
            logger.error(f"❌ Failed to export sales report: {e}")
            raise HTTPException(status_code=500, detail="Failed to export sales report") from e
