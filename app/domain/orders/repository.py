"""Order repository - Database operations for orders"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session, selectinload

from ...models import Order, OrderItem


class OrderRepository:
    """Repository for order database operations"""

    @staticmethod
    def search_orders(
        db: Session,
        status: Optional[str] = None,
        search: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Query:
        query = db.query(Order).options(selectinload(Order.items))

        if status and status != "all":
            query = query.filter(Order.status == status)

        if search:
            term = f"%{search}%"
            query = query.filter(
                or_(
                    Order.order_number.ilike(term),
                    Order.customer_name.ilike(term),
                    Order.customer_email.ilike(term),
                )
            )

        if start_date:
            query = query.filter(Order.created_at >= start_date)
        if end_date:
            query = query.filter(Order.created_at <= end_date)

        return query

    @staticmethod
    def get_order_by_id(db: Session, order_id: int) -> Optional[Order]:
        return (
            db.query(Order)
            .options(selectinload(Order.items).selectinload(OrderItem.variant))
            .filter(Order.id == order_id)
            .first()
        )

    @staticmethod
    def count_by_status(db: Session) -> dict[str, int]:
        rows = db.query(Order.status, func.count(Order.id)).group_by(Order.status).all()
        return {status: count for status, count in rows}

    @staticmethod
    def revenue_summary(db: Session) -> tuple[float, int]:
        """(revenue, order count) over orders that were not cancelled"""
        revenue, count = (
            db.query(func.coalesce(func.sum(Order.total_amount), 0), func.count(Order.id))
            .filter(Order.status != "CANCELLED")
            .one()
        )
        return float(revenue or 0), int(count or 0)
