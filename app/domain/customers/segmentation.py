"""
Customer segmentation rules

Metrics are derived from a customer's order history (newest first). Only DELIVERED
orders count towards money actually spent; every order counts towards frequency.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

SEGMENTS = ("VIP", "FREQUENT", "REGULAR", "NEW", "INACTIVE")

NO_ORDERS_DAYS = 999
PREDICTED_LIFESPAN_MONTHS = 24
DAYS_PER_MONTH = 30


def _days_between(earlier: Optional[datetime], now: datetime) -> float:
    if earlier is None:
        return 0.0
    return (now - earlier).total_seconds() / 86400


def total_spent(orders: Sequence) -> float:
    return sum(order.total_amount or 0 for order in orders if order.status == "DELIVERED")


def average_order_value(orders: Sequence) -> float:
    if not orders:
        return 0.0
    return sum(order.total_amount or 0 for order in orders) / len(orders)


def days_since_last_order(orders: Sequence, now: datetime) -> float:
    if not orders:
        return NO_ORDERS_DAYS
    return _days_between(orders[0].created_at, now)


def determine_segment(orders: Sequence, now: datetime) -> str:
    """First matching rule wins"""
    spent = total_spent(orders)
    order_count = len(orders)
    days = days_since_last_order(orders, now)

    if spent > 1000 and order_count > 5:
        return "VIP"
    if order_count > 3 and days < 60:
        return "FREQUENT"
    if order_count > 0 and days < 180:
        return "REGULAR"
    if order_count == 0 or days < 30:
        return "NEW"
    return "INACTIVE"


def calculate_risk_score(orders: Sequence, now: datetime) -> int:
    """Churn risk 10..90, higher the longer since the last order"""
    days = days_since_last_order(orders, now)
    if days > 365:
        return 90
    if days > 180:
        return 70
    if days > 90:
        return 50
    if days > 30:
        return 30
    return 10


def calculate_clv(orders: Sequence, customer_created_at: Optional[datetime], now: datetime) -> float:
    """Monthly delivered spend projected over a two year lifespan"""
    if not orders:
        return 0.0
    months_active = max(1.0, _days_between(customer_created_at, now) / DAYS_PER_MONTH)
    return total_spent(orders) / months_active * PREDICTED_LIFESPAN_MONTHS


@dataclass
class CustomerProfile:
    id: int
    name: str
    email: str
    phone: Optional[str]
    acquisition_channel: Optional[str]
    created_at: Optional[datetime]
    order_count: int
    total_spent: float
    average_order_value: float
    last_order_date: Optional[datetime]
    days_since_last_order: float
    segment: str
    risk_score: int
    lifetime_value: float


def build_profile(customer, now: Optional[datetime] = None) -> CustomerProfile:
    now = now or datetime.utcnow()
    orders = sorted(
        customer.orders or [], key=lambda o: o.created_at or datetime.min, reverse=True
    )
    return CustomerProfile(
        id=customer.id,
        name=customer.name,
        email=customer.email,
        phone=customer.phone,
        acquisition_channel=customer.acquisition_channel,
        created_at=customer.created_at,
        order_count=len(orders),
        total_spent=total_spent(orders),
        average_order_value=average_order_value(orders),
        last_order_date=orders[0].created_at if orders else None,
        days_since_last_order=days_since_last_order(orders, now),
        segment=determine_segment(orders, now),
        risk_score=calculate_risk_score(orders, now),
        lifetime_value=calculate_clv(orders, customer.created_at, now),
    )


def matches_filters(profile: CustomerProfile, search: Optional[str], segment: Optional[str]) -> bool:
    """Case-insensitive search over name, email and phone plus exact segment ("all" disables)"""
    if search:
        term = search.lower()
        haystacks = [profile.name or "", profile.email or "", profile.phone or ""]
        if not any(term in value.lower() for value in haystacks):
            return False
    if segment and segment != "all" and profile.segment != segment:
        return False
    return True


def customer_stats(profiles: Sequence[CustomerProfile], now: Optional[datetime] = None) -> dict:
    now = now or datetime.utcnow()
    total = len(profiles)
    thirty_days_ago = now - timedelta(days=30)

    new = sum(1 for p in profiles if p.created_at and p.created_at > thirty_days_ago)
    active = sum(1 for p in profiles if p.segment != "INACTIVE")
    vip = sum(1 for p in profiles if p.segment == "VIP")
    total_revenue = sum(p.total_spent for p in profiles)
    avg_order_value = sum(p.average_order_value for p in profiles) / total if total else 0

    top_clv = sorted(profiles, key=lambda p: p.lifetime_value, reverse=True)[:10]

    return {
        "total": total,
        "new": new,
        "active": active,
        "vip": vip,
        "total_revenue": round(total_revenue, 2),
        "average_order_value": round(avg_order_value, 2),
        "retention_rate": (active / total) * 100 if total else 0,
        "churn_rate": ((total - active) / total) * 100 if total else 0,
        "segment_counts": {
            segment: sum(1 for p in profiles if p.segment == segment) for segment in SEGMENTS
        },
        "top_clv": [
            {"id": p.id, "name": p.name, "lifetime_value": round(p.lifetime_value, 2)}
            for p in top_clv
        ],
    }
