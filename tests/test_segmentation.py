from datetime import datetime, timedelta
from types import SimpleNamespace

from app.domain.customers.segmentation import (
    average_order_value,
    build_profile,
    calculate_clv,
    calculate_risk_score,
    customer_stats,
    days_since_last_order,
    determine_segment,
    matches_filters,
    total_spent,
)

NOW = datetime(2024, 6, 1, 12, 0, 0)


def order(days_ago, amount=100.0, status="DELIVERED"):
    return SimpleNamespace(
        created_at=NOW - timedelta(days=days_ago), total_amount=amount, status=status
    )


def test_total_spent_counts_only_delivered_orders():
    orders = [order(1, 50), order(2, 70, "CANCELLED"), order(3, 30, "PENDING")]

    assert total_spent(orders) == 50


def test_average_order_value_uses_every_order():
    orders = [order(1, 50), order(2, 70, "CANCELLED")]

    assert average_order_value(orders) == 60
    assert average_order_value([]) == 0


def test_days_since_last_order_without_orders():
    assert days_since_last_order([], NOW) == 999


def test_vip_needs_spend_and_order_count():
    orders = [order(day, 250) for day in range(1, 7)]

    assert determine_segment(orders, NOW) == "VIP"


def test_big_spender_with_few_orders_is_not_vip():
    orders = [order(1, 2000), order(2, 2000)]

    assert determine_segment(orders, NOW) == "REGULAR"


def test_frequent_customer():
    orders = [order(day, 20) for day in (10, 20, 30, 40)]

    assert determine_segment(orders, NOW) == "FREQUENT"


def test_new_customer_without_orders():
    assert determine_segment([], NOW) == "NEW"


def test_inactive_after_180_days():
    assert determine_segment([order(200)], NOW) == "INACTIVE"


def test_risk_score_thresholds():
    assert calculate_risk_score([order(10)], NOW) == 10
    assert calculate_risk_score([order(31)], NOW) == 30
    assert calculate_risk_score([order(91)], NOW) == 50
    assert calculate_risk_score([order(181)], NOW) == 70
    assert calculate_risk_score([order(400)], NOW) == 90
    assert calculate_risk_score([], NOW) == 90


def test_clv_projects_monthly_spend_over_two_years():
    created = NOW - timedelta(days=60)

    assert calculate_clv([order(5, 120)], created, NOW) == 120 / 2 * 24


def test_clv_uses_at_least_one_month():
    created = NOW - timedelta(days=3)

    assert calculate_clv([order(1, 100)], created, NOW) == 2400
    assert calculate_clv([], created, NOW) == 0


def test_build_profile_sorts_orders_newest_first():
    customer = SimpleNamespace(
        id=1,
        name="Ana",
        email="ana@example.com",
        phone=None,
        acquisition_channel="Organic",
        created_at=NOW - timedelta(days=90),
        orders=[order(40), order(5), order(20)],
    )

    profile = build_profile(customer, NOW)

    assert profile.order_count == 3
    assert profile.last_order_date == NOW - timedelta(days=5)
    assert profile.days_since_last_order == 5
    assert profile.segment == "REGULAR"


def test_matches_filters():
    customer = SimpleNamespace(
        id=1, name="Ana García", email="ana@example.com", phone="+34612345678",
        acquisition_channel=None, created_at=NOW, orders=[],
    )
    profile = build_profile(customer, NOW)

    assert matches_filters(profile, "garcía", None)
    assert matches_filters(profile, "612", "NEW")
    assert matches_filters(profile, None, "all")
    assert not matches_filters(profile, None, "VIP")
    assert not matches_filters(profile, "pedro", None)


def test_customer_stats():
    recent = SimpleNamespace(
        id=1, name="Ana", email="a@example.com", phone=None, acquisition_channel=None,
        created_at=NOW - timedelta(days=5), orders=[order(2, 100)],
    )
    dormant = SimpleNamespace(
        id=2, name="Luis", email="l@example.com", phone=None, acquisition_channel=None,
        created_at=NOW - timedelta(days=400), orders=[order(300, 50)],
    )
    profiles = [build_profile(recent, NOW), build_profile(dormant, NOW)]

    stats = customer_stats(profiles, NOW)

    assert stats["total"] == 2
    assert stats["new"] == 1
    assert stats["active"] == 1
    assert stats["retention_rate"] == 50
    assert stats["churn_rate"] == 50
    assert stats["total_revenue"] == 150
    assert stats["segment_counts"]["INACTIVE"] == 1
    assert stats["top_clv"][0]["id"] == 1


def test_customer_stats_empty():
    stats = customer_stats([], NOW)

    assert stats["total"] == 0
    assert stats["retention_rate"] == 0
    assert stats["average_order_value"] == 0
