"""Loyalty program schemas"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.validators import validate_hex_color


class TierPerks(BaseModel):
    free_shipping: bool = False
    priority_support: bool = False
    exclusive_offers: bool = False
    birthday_bonus: int = Field(0, ge=0)


class LoyaltyTier(BaseModel):
    id: str
    name: str
    min_points: int = Field(..., ge=0)
    multiplier: float = Field(1, gt=0)
    color: Optional[str] = None
    benefits: list[str] = []
    perks: TierPerks = TierPerks()

    @field_validator("color")
    @classmethod
    def check_color(cls, v):
        return validate_hex_color(v)


class LoyaltyReward(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    points_cost: int = Field(..., gt=0)
    type: Literal["discount", "product", "shipping", "experience"]
    value: float = 0
    is_active: bool = True
    category: Optional[str] = None
    limit_per_customer: Optional[int] = Field(None, ge=1)
    valid_until: Optional[datetime] = None


class LoyaltyRule(BaseModel):
    id: str
    action: str
    points: int
    description: Optional[str] = None
    is_active: bool = True
    frequency: Literal["once", "daily", "weekly", "monthly", "unlimited"] = "unlimited"


class LoyaltyProgramConfig(BaseModel):
    name: str
    description: Optional[str] = None
    is_active: bool = True
    points_per_euro: float = Field(..., gt=0)
    minimum_redemption: int = Field(..., ge=0)
    expiration_months: int = Field(..., ge=1)
    tiers: list[LoyaltyTier]
    rewards: list[LoyaltyReward] = []
    rules: list[LoyaltyRule] = []

    @model_validator(mode="after")
    def check_tiers(self):
        if not self.tiers:
            raise ValueError("At least one tier is required")
        ids = [t.id for t in self.tiers]
        if len(ids) != len(set(ids)):
            raise ValueError("Tier ids must be unique")
        if not any(t.min_points == 0 for t in self.tiers):
            raise ValueError("One tier must start at 0 points")
        reward_ids = [r.id for r in self.rewards]
        if len(reward_ids) != len(set(reward_ids)):
            raise ValueError("Reward ids must be unique")
        return self


class AwardRequest(BaseModel):
    """Either a purchase amount (points computed from the tier) or manual points"""

    purchase_amount: Optional[float] = Field(None, gt=0)
    points: Optional[int] = None
    description: Optional[str] = None

    @model_validator(mode="after")
    def check_one(self):
        if (self.purchase_amount is None) == (self.points is None):
            raise ValueError("Provide either purchase_amount or points")
        if self.points == 0:
            raise ValueError("Points must not be zero")
        return self


class RedeemRequest(BaseModel):
    reward_id: str


class LoyaltyTransactionResponse(BaseModel):
    id: int
    points: int
    action: str
    description: Optional[str] = None
    reward_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LoyaltyMemberResponse(BaseModel):
    customer_id: int
    name: str
    email: str
    total_points: int
    available_points: int
    rewards_redeemed: int
    current_tier: str
    next_tier: Optional[str] = None
    points_to_next_tier: Optional[int] = None
    joined_at: Optional[datetime] = None
    last_activity: Optional[datetime] = None
    history: list[LoyaltyTransactionResponse] = []
