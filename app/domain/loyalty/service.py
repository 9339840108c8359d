"""Loyalty service - program configuration, points and redemptions"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Customer
from ...models_loyalty import LoyaltyAccount, LoyaltyTransaction
from ...settings_store import get_json_setting, set_json_setting
from ...shared.exports import csv_response, format_datetime
from ...shared.listing import paginate
from .schemas import AwardRequest, LoyaltyMemberResponse, LoyaltyProgramConfig
from .tiers import (
    DEFAULT_PROGRAM,
    PROGRAM_SETTING_KEY,
    find_reward,
    find_rule,
    points_for_purchase,
    resolve_tier,
)

logger = logging.getLogger(__name__)


class LoyaltyService:
    def __init__(self, db: Session):
        self.db = db

    def get_program(self) -> dict:
        return get_json_setting(self.db, PROGRAM_SETTING_KEY, DEFAULT_PROGRAM)

    def update_program(self, config: LoyaltyProgramConfig) -> dict:
        program = config.model_dump(mode="json")
        set_json_setting(self.db, PROGRAM_SETTING_KEY, program)
        logger.info(
            f"✅ Loyalty program updated: {len(config.tiers)} tiers, {len(config.rewards)} rewards"
        )
        # Tier thresholds may have moved
        for account in self.db.query(LoyaltyAccount).all():
            account.current_tier = resolve_tier(account.total_points, program["tiers"])["current"]["id"]
        self.db.commit()
        return program

    def _get_customer(self, customer_id: int) -> Customer:
        customer = self.db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")
        return customer

    def get_or_create_account(self, customer: Customer) -> LoyaltyAccount:
        if customer.loyalty_account:
            return customer.loyalty_account
        account = LoyaltyAccount(
            customer_id=customer.id,
            total_points=0,
            available_points=0,
            rewards_redeemed=0,
            current_tier="bronze",
        )
        customer.loyalty_account = account
        self.db.add(account)
        self.db.flush()
        return account

    def _record(self, account: LoyaltyAccount, points: int, action: str, description: str,
                reward_id: Optional[str] = None) -> None:
        account.transactions.append(
            LoyaltyTransaction(
                points=points,
                action=action,
                description=description,
                reward_id=reward_id,
                created_at=datetime.utcnow(),
            )
        )
        account.last_activity = datetime.utcnow()

    def _refresh_tier(self, account: LoyaltyAccount, program: dict) -> None:
        previous = account.current_tier
        account.current_tier = resolve_tier(account.total_points, program["tiers"])["current"]["id"]
        if account.current_tier != previous:
            logger.info(f"🏆 Loyalty account {account.id} moved from {previous} to {account.current_tier}")

    def award_points(self, customer_id: int, data: AwardRequest) -> LoyaltyMemberResponse:
        program = self.get_program()
        if not program.get("is_active", True):
            raise HTTPException(status_code=400, detail="Loyalty program is not active")

        customer = self._get_customer(customer_id)
        account = self.get_or_create_account(customer)

        if data.purchase_amount is not None:
            tier = resolve_tier(account.total_points, program["tiers"])["current"]
            points = points_for_purchase(data.purchase_amount, program["points_per_euro"], tier)
            first_purchase = not any(t.action == "purchase" for t in account.transactions)
            self._record(
                account,
                points,
                "purchase",
                data.description or f"Purchase of €{data.purchase_amount:.2f}",
            )
            bonus_rule = find_rule(program, "first-purchase")
            if first_purchase and bonus_rule and bonus_rule.get("is_active"):
                self._record(account, bonus_rule["points"], "bonus", bonus_rule["action"])
                points += bonus_rule["points"]
        else:
            points = data.points
            if account.available_points + points < 0:
                raise HTTPException(status_code=400, detail="Adjustment exceeds available points")
            self._record(account, points, "manual", data.description or "Manual adjustment")

        account.available_points += points
        if points > 0:
            account.total_points += points
        self._refresh_tier(account, program)

        self.db.commit()
        logger.info(f"⭐ {points} points awarded to customer {customer_id}")
        return self.member_response(customer, account, program)

    def redeem_reward(self, customer_id: int, reward_id: str) -> LoyaltyMemberResponse:
        program = self.get_program()
        customer = self._get_customer(customer_id)
        account = self.get_or_create_account(customer)

        reward = find_reward(program, reward_id)
        if not reward:
            raise HTTPException(status_code=404, detail="Reward not found")
        if not reward.get("is_active", True):
            raise HTTPException(status_code=400, detail="Reward is not active")
        if account.available_points < program["minimum_redemption"]:
            raise HTTPException(
                status_code=400,
                detail=f"A minimum of {program['minimum_redemption']} points is needed to redeem",
            )
        if account.available_points < reward["points_cost"]:
            raise HTTPException(status_code=400, detail="Insufficient points")

        limit = reward.get("limit_per_customer")
        if limit:
            used = sum(1 for t in account.transactions if t.reward_id == reward_id)
            if used >= limit:
                raise HTTPException(status_code=400, detail="Reward redemption limit reached")

        self._record(account, -reward["points_cost"], "redeem", reward["name"], reward_id=reward_id)
        account.available_points -= reward["points_cost"]
        account.rewards_redeemed += 1

        self.db.commit()
        logger.info(f"🎁 Customer {customer_id} redeemed {reward_id}")
        return self.member_response(customer, account, program)

    def member_response(
        self, customer: Customer, account: LoyaltyAccount, program: dict, history: bool = True
    ) -> LoyaltyMemberResponse:
        tier_info = resolve_tier(account.total_points, program["tiers"])
        return LoyaltyMemberResponse(
            customer_id=customer.id,
            name=customer.name,
            email=customer.email,
            total_points=account.total_points,
            available_points=account.available_points,
            rewards_redeemed=account.rewards_redeemed,
            current_tier=tier_info["current"]["id"],
            next_tier=tier_info["next"]["id"] if tier_info["next"] else None,
            points_to_next_tier=tier_info["points_to_next"],
            joined_at=account.joined_at,
            last_activity=account.last_activity,
            history=list(account.transactions) if history else [],
        )

    def get_member(self, customer_id: int) -> LoyaltyMemberResponse:
        customer = self._get_customer(customer_id)
        if not customer.loyalty_account:
            raise HTTPException(status_code=404, detail="Customer is not a loyalty member")
        return self.member_response(customer, customer.loyalty_account, self.get_program())

    def _member_query(self, search: Optional[str], tier: Optional[str]):
        query = self.db.query(LoyaltyAccount).join(Customer)
        if search:
            term = f"%{search}%"
            query = query.filter(or_(Customer.name.ilike(term), Customer.email.ilike(term)))
        if tier and tier != "all":
            query = query.filter(LoyaltyAccount.current_tier == tier)
        return query.order_by(LoyaltyAccount.total_points.desc())

    def list_members(
        self, search: Optional[str] = None, tier: Optional[str] = None, page: int = 1, limit: int = 20
    ) -> dict:
        program = self.get_program()
        accounts, pagination = paginate(self._member_query(search, tier), page, limit)
        return {
            "members": [
                self.member_response(a.customer, a, program, history=False) for a in accounts
            ],
            "pagination": pagination,
        }

    def get_stats(self) -> dict:
        program = self.get_program()
        accounts = self.db.query(LoyaltyAccount).all()
        transactions = self.db.query(LoyaltyTransaction).all()
        total_customers = self.db.query(Customer).count()
        month_ago = datetime.utcnow() - timedelta(days=30)

        members = len(accounts)
        issued = sum(t.points for t in transactions if t.points > 0)
        redeemed = -sum(t.points for t in transactions if t.action == "redeem")

        reward_usage: dict[str, dict] = {}
        for t in transactions:
            if t.reward_id:
                entry = reward_usage.setdefault(
                    t.reward_id, {"reward_id": t.reward_id, "times_redeemed": 0, "points_used": 0}
                )
                entry["times_redeemed"] += 1
                entry["points_used"] += -t.points

        return {
            "total_members": members,
            "active_members": sum(
                1 for a in accounts if a.last_activity and a.last_activity >= month_ago
            ),
            "points_issued": issued,
            "points_redeemed": redeemed,
            "points_outstanding": sum(a.available_points for a in accounts),
            "rewards_redeemed": sum(a.rewards_redeemed for a in accounts),
            "average_points": round(sum(a.available_points for a in accounts) / members, 2) if members else 0,
            "redemption_rate": round(redeemed / issued * 100, 2) if issued else 0,
            "conversion_rate": round(members / total_customers * 100, 2) if total_customers else 0,
            "tier_distribution": [
                {
                    "tier": t["id"],
                    "name": t["name"],
                    "count": sum(1 for a in accounts if a.current_tier == t["id"]),
                    "percentage": round(
                        sum(1 for a in accounts if a.current_tier == t["id"]) / members * 100, 1
                    )
                    if members
                    else 0,
                }
                for t in sorted(program["tiers"], key=lambda t: t["min_points"])
            ],
            "top_rewards": sorted(
                reward_usage.values(), key=lambda r: r["times_redeemed"], reverse=True
            )[:5],
        }

    def export_members_csv(self) -> StreamingResponse:
        try:
            program = self.get_program()
            accounts = self._member_query(None, None).all()
            logger.info(f"📊 Exporting {len(accounts)} loyalty members")
            return csv_response(
                "loyalty_members",
                [
                    "Customer ID",
                    "Name",
                    "Email",
                    "Tier",
                    "Total Points",
                    "Available Points",
                    "Rewards Redeemed",
                    "Joined At",
                    "Last Activity",
                ],
                (
                    [
                        a.customer.id,
                        a.customer.name,
                        a.customer.email,
                        resolve_tier(a.total_points, program["tiers"])["current"]["name"],
                        a.total_points,
                        a.available_points,
                        a.rewards_redeemed,
                        format_datetime(a.joined_at),
                        format_datetime(a.last_activity),
                    ]
                    for a in accounts
                ),
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"❌ Loyalty CSV export failed: {e}")
            raise HTTPException(status_code=500, detail="Failed to export loyalty members") from e
