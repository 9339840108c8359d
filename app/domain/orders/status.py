"""Order lifecycle rules: status transitions, numbering and totals"""

from datetime import datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ...models import Order

ORDER_STATUSES = (
    "PENDING",
    "CONFIRMED",
    "IN_PRODUCTION",
    "READY_FOR_PICKUP",
    "SHIPPED",
    "DELIVERED",
    "CANCELLED",
    "REFUNDED",
)

ORDER_STATUS_TRANSITIONS: dict[str, tuple[str, ...]] = {
    "PENDING": ("CONFIRMED", "CANCELLED"),
    "CONFIRMED": ("IN_PRODUCTION", "CANCELLED"),
    "IN_PRODUCTION": ("READY_FOR_PICKUP", "SHIPPED", "CANCELLED"),
    "READY_FOR_PICKUP": ("DELIVERED", "CANCELLED"),
    "SHIPPED": ("DELIVERED", "CANCELLED"),
    "DELIVERED": ("REFUNDED",),
    "CANCELLED": (),  # Final
    "REFUNDED": (),  # Final
}


def allowed_transitions(current_status: str) -> tuple[str, ...]:
    return ORDER_STATUS_TRANSITIONS.get(current_status, ())


def is_valid_status_transition(current_status: str, new_status: str) -> bool:
    return new_status in allowed_transitions(current_status)


def calculate_order_total(
    items: Iterable[dict], shipping_cost: float = 0, tax_rate: float = 0
) -> dict:
    """Items are dicts with unit_price and quantity"""
    subtotal = sum(item["unit_price"] * item["quantity"] for item in items)
    tax_amount = subtotal * tax_rate
    return {
        "subtotal": subtotal,
        "tax_amount": tax_amount,
        "shipping_cost": shipping_cost,
        "total_amount": subtotal + tax_amount + shipping_cost,
    }


def generate_order_number(db: Session, today: Optional[datetime] = None) -> str:
    """LV<yymmdd>-<sequence of the day, 3 digits>"""
    today = today or datetime.utcnow()
    start_of_day = datetime(today.year, today.month, today.day)
    end_of_day = start_of_day + timedelta(days=1)

    todays_orders = (
        db.query(Order)
        .filter(Order.created_at >= start_of_day, Order.created_at < end_of_day)
        .count()
    )
    prefix = f"LV{today:%y%m%d}"
    sequence = todays_orders + 1
    # Deleted orders leave gaps, skip numbers still taken
    while db.query(Order).filter(Order.order_number == f"{prefix}-{sequence:03d}").first():
        sequence += 1
    return f"{prefix}-{sequence:03d}"
