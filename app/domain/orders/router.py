"""Order router - FastAPI endpoints for order management"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .notifications import STATUS_EMAILS, send_order_email
from .schemas import OrderCreate, OrderResponse, OrderUpdate, StatusUpdate
from .service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    """Dependency injection for OrderService"""
    return OrderService(db)


@router.get("")
async def list_orders(
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: OrderService = Depends(get_order_service),
):
    orders, pagination = service.list_orders(
        status, search, start_date, end_date, sort_by, sort_order, page, limit
    )
    return {
        "orders": [OrderResponse.model_validate(o) for o in orders],
        "pagination": pagination,
    }


@router.get("/stats")
async def get_order_stats(service: OrderService = Depends(get_order_service)):
    return service.get_stats()


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: int, service: OrderService = Depends(get_order_service)):
    return service.get_order(order_id)


@router.post("", response_model=OrderResponse, status_code=201)
async def create_order(
    data: OrderCreate,
    background_tasks: BackgroundTasks,
    service: OrderService = Depends(get_order_service),
):
    """Create an order, reserving variant stock"""
    order = service.create_order(data)
    if data.send_confirmation:
        background_tasks.add_task(send_order_email, order.id, "CREATED")
    return order


@router.patch("/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: int, data: OrderUpdate, service: OrderService = Depends(get_order_service)
):
    return service.update_order(order_id, data)


@router.get("/{order_id}/status")
async def get_order_status(order_id: int, service: OrderService = Depends(get_order_service)):
    """Current status and the statuses it can move to"""
    return service.get_status_options(order_id)


@router.patch("/{order_id}/status")
async def update_order_status(
    order_id: int,
    data: StatusUpdate,
    background_tasks: BackgroundTasks,
    service: OrderService = Depends(get_order_service),
):
    order = service.update_status(order_id, data.status, data.notes)

    # The update never fails because of email delivery
    if data.status in STATUS_EMAILS:
        background_tasks.add_task(send_order_email, order.id, data.status)

    return {
        "order": OrderResponse.model_validate(order),
        "message": f"Status updated to {data.status}",
    }
