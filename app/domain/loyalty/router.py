"""Loyalty program router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import AwardRequest, LoyaltyMemberResponse, LoyaltyProgramConfig, RedeemRequest
from .service import LoyaltyService

router = APIRouter(prefix="/loyalty-program", tags=["Loyalty"])


def get_loyalty_service(db: Session = Depends(get_db)) -> LoyaltyService:
    return LoyaltyService(db)


@router.get("/config")
async def get_program_config(service: LoyaltyService = Depends(get_loyalty_service)):
    return service.get_program()


@router.put("/config")
async def update_program_config(
    config: LoyaltyProgramConfig, service: LoyaltyService = Depends(get_loyalty_service)
):
    return {"program": service.update_program(config), "message": "Loyalty program updated"}


@router.get("/stats")
async def get_loyalty_stats(service: LoyaltyService = Depends(get_loyalty_service)):
    return service.get_stats()


@router.get("/export")
async def export_loyalty_members(service: LoyaltyService = Depends(get_loyalty_service)):
    return service.export_members_csv()


@router.get("/customers")
async def list_loyalty_members(
    search: Optional[str] = Query(None),
    tier: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: LoyaltyService = Depends(get_loyalty_service),
):
    return service.list_members(search, tier, page, limit)


@router.get("/customers/{customer_id}", response_model=LoyaltyMemberResponse)
async def get_loyalty_member(
    customer_id: int, service: LoyaltyService = Depends(get_loyalty_service)
):
    return service.get_member(customer_id)


@router.post("/customers/{customer_id}/award", response_model=LoyaltyMemberResponse)
async def award_points(
    customer_id: int,
    data: AwardRequest,
    service: LoyaltyService = Depends(get_loyalty_service),
):
    """Award purchase points (tier multiplier applies) or a manual adjustment"""
    return service.award_points(customer_id, data)


@router.post("/customers/{customer_id}/redeem", response_model=LoyaltyMemberResponse)
async def redeem_reward(
    customer_id: int,
    data: RedeemRequest,
    service: LoyaltyService = Depends(get_loyalty_service),
):
    return service.redeem_reward(customer_id, data.reward_id)
