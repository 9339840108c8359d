"""Shipping method router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import (
    BulkShippingAction,
    ShippingMethodCreate,
    ShippingMethodResponse,
    ShippingMethodUpdate,
    ShippingQuote,
)
from .service import ShippingService

router = APIRouter(prefix="/shipping-methods", tags=["Shipping"])


def get_shipping_service(db: Session = Depends(get_db)) -> ShippingService:
    return ShippingService(db)


@router.get("")
async def list_shipping_methods(
    include_inactive: bool = Query(False),
    is_active: Optional[bool] = Query(None),
    service: ShippingService = Depends(get_shipping_service),
):
    """Active methods by default; include_inactive=true returns all (or filters by is_active)"""
    methods = service.list_methods(include_inactive, is_active)
    return {"shipping_methods": [ShippingMethodResponse.model_validate(m) for m in methods]}


@router.get("/quote", response_model=list[ShippingQuote])
async def quote_shipping(
    subtotal: float = Query(..., ge=0),
    service: ShippingService = Depends(get_shipping_service),
):
    return service.quote(subtotal)


@router.post("", status_code=201)
async def create_shipping_method(
    data: ShippingMethodCreate, service: ShippingService = Depends(get_shipping_service)
):
    method = service.create_method(data)
    return {
        "shipping_method": ShippingMethodResponse.model_validate(method),
        "message": "Shipping method created",
    }


@router.patch("")
async def bulk_update_shipping_methods(
    data: BulkShippingAction, service: ShippingService = Depends(get_shipping_service)
):
    count = service.bulk_action(data.action, data.method_ids)
    return {
        "message": f"Operation '{data.action}' completed on {count} method(s)",
        "count": count,
    }


@router.get("/{method_id}", response_model=ShippingMethodResponse)
async def get_shipping_method(
    method_id: int, service: ShippingService = Depends(get_shipping_service)
):
    return service.get_method(method_id)


@router.put("/{method_id}", response_model=ShippingMethodResponse)
async def update_shipping_method(
    method_id: int,
    data: ShippingMethodUpdate,
    service: ShippingService = Depends(get_shipping_service),
):
    return service.update_method(method_id, data)


@router.delete("/{method_id}")
async def delete_shipping_method(
    method_id: int, service: ShippingService = Depends(get_shipping_service)
):
    service.delete_method(method_id)
    return {"message": "Shipping method deleted"}
