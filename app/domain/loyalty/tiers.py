"""Loyalty program definition and tier arithmetic"""

import math
from typing import Optional

from ...config import STORE_NAME

PROGRAM_SETTING_KEY = "loyalty_program"

DEFAULT_PROGRAM = {
    "name": f"{STORE_NAME} Rewards",
    "description": f"Loyalty program for {STORE_NAME} customers",
    "is_active": True,
    "points_per_euro": 10,
    "minimum_redemption": 100,
    "expiration_months": 24,
    "tiers": [
        {
            "id": "bronze",
            "name": "Bronze",
            "min_points": 0,
            "multiplier": 1,
            "color": "#CD7F32",
            "benefits": ["Points on every purchase", "Special offers", "New product alerts"],
            "perks": {
                "free_shipping": False,
                "priority_support": False,
                "exclusive_offers": False,
                "birthday_bonus": 50,
            },
        },
        {
            "id": "silver",
            "name": "Silver",
            "min_points": 500,
            "multiplier": 1.2,
            "color": "#C0C0C0",
            "benefits": [
                "1.2x points on every purchase",
                "Free shipping on orders over €50",
                "Early access to offers",
                "Priority support",
            ],
            "perks": {
                "free_shipping": True,
                "priority_support": True,
                "exclusive_offers": True,
                "birthday_bonus": 100,
            },
        },
        {
            "id": "gold",
            "name": "Gold",
            "min_points": 1500,
            "multiplier": 1.5,
            "color": "#FFD700",
            "benefits": [
                "1.5x points on every purchase",
                "Free shipping on every order",
                "Exclusive products",
                "VIP support",
            ],
            "perks": {
                "free_shipping": True,
                "priority_support": True,
                "exclusive_offers": True,
                "birthday_bonus": 200,
            },
        },
        {
            "id": "platinum",
            "name": "Platinum",
            "min_points": 5000,
            "multiplier": 2,
            "color": "#E5E4E2",
            "benefits": [
                "2x points on every purchase",
                "Free express shipping",
                "Exclusive designs",
                "Personal design consultant",
                "VIP events",
            ],
            "perks": {
                "free_shipping": True,
                "priority_support": True,
                "exclusive_offers": True,
                "birthday_bonus": 500,
            },
        },
    ],
    "rewards": [
        {"id": "discount-5", "name": "5% Discount", "points_cost": 100, "type": "discount", "value": 5, "is_active": True, "category": "Discounts", "limit_per_customer": 1},
        {"id": "discount-10", "name": "10% Discount", "points_cost": 200, "type": "discount", "value": 10, "is_active": True, "category": "Discounts", "limit_per_customer": 1},
        {"id": "discount-15", "name": "15% Discount", "points_cost": 300, "type": "discount", "value": 15, "is_active": True, "category": "Discounts", "limit_per_customer": 1},
        {"id": "free-shipping", "name": "Free Shipping", "points_cost": 150, "type": "shipping", "value": 0, "is_active": True, "category": "Shipping"},
        {"id": "express-shipping", "name": "Express Shipping", "points_cost": 250, "type": "shipping", "value": 0, "is_active": True, "category": "Shipping"},
        {"id": "tshirt-premium", "name": "Premium T-Shirt", "points_cost": 800, "type": "product", "value": 35, "is_active": True, "category": "Products"},
        {"id": "mug-ceramic", "name": "Ceramic Mug", "points_cost": 500, "type": "product", "value": 20, "is_active": True, "category": "Products"},
        {"id": "design-consultation", "name": "Design Consultation", "points_cost": 1000, "type": "experience", "value": 0, "is_active": True, "category": "Experiences", "limit_per_customer": 2},
        {"id": "vip-event", "name": "VIP Event", "points_cost": 2000, "type": "experience", "value": 0, "is_active": True, "category": "Experiences", "limit_per_customer": 1},
    ],
    "rules": [
        {"id": "purchase-points", "action": "Purchase", "points": 10, "description": "10 points per euro spent", "is_active": True, "frequency": "unlimited"},
        {"id": "first-purchase", "action": "First purchase", "points": 100, "description": "Welcome bonus on the first purchase", "is_active": True, "frequency": "once"},
        {"id": "review-product", "action": "Product review", "points": 25, "description": "Points for reviewing products", "is_active": True, "frequency": "unlimited"},
        {"id": "social-share", "action": "Social share", "points": 15, "description": "Share a purchase on social media", "is_active": True, "frequency": "daily"},
        {"id": "birthday-bonus", "action": "Birthday", "points": 100, "description": "Birthday bonus", "is_active": True, "frequency": "once"},
        {"id": "referral-friend", "action": "Refer a friend", "points": 200, "description": "When a referred friend places a first order", "is_active": True, "frequency": "unlimited"},
    ],
}


def resolve_tier(total_points: int, tiers: list[dict]) -> dict:
    """
    Current tier (highest min_points reached), the next tier and the points missing
    to reach it. Next tier values are None at the top tier.
    """
    ordered = sorted(tiers, key=lambda t: t["min_points"])
    current = ordered[0]
    next_tier: Optional[dict] = None
    for tier in ordered:
        if total_points >= tier["min_points"]:
            current = tier
        elif next_tier is None:
            next_tier = tier

    return {
        "current": current,
        "next": next_tier,
        "points_to_next": next_tier["min_points"] - total_points if next_tier else None,
    }


def points_for_purchase(amount: float, points_per_euro: float, tier: dict) -> int:
    return math.floor(amount * points_per_euro * tier.get("multiplier", 1))


def find_rule(program: dict, rule_id: str) -> Optional[dict]:
    return next((r for r in program.get("rules", []) if r["id"] == rule_id), None)


def find_reward(program: dict, reward_id: str) -> Optional[dict]:
    return next((r for r in program.get("rewards", []) if r["id"] == reward_id), None)
