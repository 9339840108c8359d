"""Reports router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .service import ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])


def get_report_service(db: Session = Depends(get_db)) -> ReportService:
    return ReportService(db)


@router.get("/sales")
async def get_sales_report(
    period: int = Query(30, ge=1, le=3650, description="Days back from now"),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    service: ReportService = Depends(get_report_service),
):
    return service.sales_report(period, start_date, end_date)


@router.get("/sales/export")
async def export_sales_report(
    period: int = Query(30, ge=1, le=3650),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    service: ReportService = Depends(get_report_service),
):
    return service.export_sales(period, start_date, end_date)
