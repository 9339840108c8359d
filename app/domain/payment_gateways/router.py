"""Payment gateway router"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import GatewayCreate, GatewayResponse, GatewayTestResult, GatewayUpdate
from .service import PaymentGatewayService, to_response

router = APIRouter(prefix="/payment-gateways", tags=["Payment Gateways"])


class ToggleRequest(BaseModel):
    enabled: bool


def get_gateway_service(db: Session = Depends(get_db)) -> PaymentGatewayService:
    return PaymentGatewayService(db)


@router.get("", response_model=list[GatewayResponse])
async def list_gateways(service: PaymentGatewayService = Depends(get_gateway_service)):
    return [to_response(g) for g in service.list_gateways()]


@router.get("/stats")
async def get_gateway_stats(
    amount: float = Query(100, ge=0),
    service: PaymentGatewayService = Depends(get_gateway_service),
):
    return service.get_stats(amount)


@router.post("", response_model=GatewayResponse, status_code=201)
async def create_gateway(
    data: GatewayCreate, service: PaymentGatewayService = Depends(get_gateway_service)
):
    return to_response(service.create_gateway(data))


@router.get("/{gateway_id}", response_model=GatewayResponse)
async def get_gateway(
    gateway_id: int, service: PaymentGatewayService = Depends(get_gateway_service)
):
    return to_response(service.get_gateway(gateway_id))


@router.put("/{gateway_id}", response_model=GatewayResponse)
async def update_gateway(
    gateway_id: int,
    data: GatewayUpdate,
    service: PaymentGatewayService = Depends(get_gateway_service),
):
    return to_response(service.update_gateway(gateway_id, data))


@router.delete("/{gateway_id}")
async def delete_gateway(
    gateway_id: int, service: PaymentGatewayService = Depends(get_gateway_service)
):
    service.delete_gateway(gateway_id)
    return {"message": "Payment gateway deleted"}


@router.post("/{gateway_id}/toggle", response_model=GatewayResponse)
async def toggle_gateway(
    gateway_id: int,
    data: ToggleRequest,
    service: PaymentGatewayService = Depends(get_gateway_service),
):
    return to_response(service.toggle_gateway(gateway_id, data.enabled))


@router.post("/{gateway_id}/test", response_model=GatewayTestResult)
async def test_gateway(
    gateway_id: int, service: PaymentGatewayService = Depends(get_gateway_service)
):
    """Offline check of the stored credentials and limits"""
    return service.test_gateway(gateway_id)
