"""Customer router - CRM endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import CustomerCreate, CustomerProfileResponse, CustomerUpdate
from .segmentation import build_profile
from .service import CustomerService, send_customer_welcome

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["Customers"])


def get_customer_service(db: Session = Depends(get_db)) -> CustomerService:
    """Dependency injection for CustomerService"""
    return CustomerService(db)


@router.get("")
async def list_customers(
    search: Optional[str] = Query(None),
    segment: Optional[str] = Query(None),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: CustomerService = Depends(get_customer_service),
):
    """Customers with segment, risk and lifetime value, plus dashboard stats"""
    result = service.list_customers(search, segment, sort_by, sort_order, page, limit)
    result["customers"] = [
        CustomerProfileResponse.model_validate(p) for p in result["customers"]
    ]
    return result


@router.get("/stats")
async def get_customer_stats(service: CustomerService = Depends(get_customer_service)):
    return service.get_stats()


@router.get("/export")
async def export_customers_csv(
    search: Optional[str] = Query(None),
    segment: Optional[str] = Query(None),
    service: CustomerService = Depends(get_customer_service),
):
    """Export customers as CSV with optional filters"""
    return service.export_customers_csv(search, segment)


@router.get("/{customer_id}", response_model=CustomerProfileResponse)
async def get_customer(
    customer_id: int, service: CustomerService = Depends(get_customer_service)
):
    return service.get_profile(customer_id)


@router.post("", response_model=CustomerProfileResponse, status_code=201)
async def create_customer(
    data: CustomerCreate,
    background_tasks: BackgroundTasks,
    service: CustomerService = Depends(get_customer_service),
):
    customer = service.create_customer(data)
    if data.send_welcome:
        background_tasks.add_task(send_customer_welcome, customer.id)
    return build_profile(customer)


@router.patch("/{customer_id}", response_model=CustomerProfileResponse)
async def update_customer(
    customer_id: int,
    data: CustomerUpdate,
    service: CustomerService = Depends(get_customer_service),
):
    return build_profile(service.update_customer(customer_id, data))


@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: int, service: CustomerService = Depends(get_customer_service)
):
    service.delete_customer(customer_id)
    return {"message": "Customer deleted successfully"}
