"""Invoice and finances routers"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ...database import get_db
from .invoice_pdf import InvoicePDFGenerator
from .schemas import InvoiceCreate, InvoiceResponse, InvoiceUpdate
from .service import InvoiceService, to_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["Invoices"])
finances_router = APIRouter(prefix="/finances", tags=["Finances"])


def get_invoice_service(db: Session = Depends(get_db)) -> InvoiceService:
    return InvoiceService(db)


@router.get("")
async def list_invoices(
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: InvoiceService = Depends(get_invoice_service),
):
    invoices, pagination = service.list_invoices(status, page, limit)
    return {"invoices": [to_response(i) for i in invoices], "pagination": pagination}


@router.post("", response_model=InvoiceResponse, status_code=201)
async def create_invoice(
    data: InvoiceCreate, service: InvoiceService = Depends(get_invoice_service)
):
    """Issue the invoice for an order"""
    return to_response(service.create_invoice(data))


@router.get("/export")
async def export_invoices(
    status: Optional[str] = Query(None),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.export_invoices(status)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(invoice_id: int, service: InvoiceService = Depends(get_invoice_service)):
    return to_response(service.get_invoice(invoice_id))


@router.patch("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: int,
    data: InvoiceUpdate,
    service: InvoiceService = Depends(get_invoice_service),
):
    return to_response(service.update_invoice(invoice_id, data))


@router.get("/{invoice_id}/pdf")
async def download_invoice_pdf(
    invoice_id: int, service: InvoiceService = Depends(get_invoice_service)
):
    invoice = service.get_invoice(invoice_id)
    try:
        pdf_bytes = InvoicePDFGenerator(invoice).generate()
    except Exception as e:
        logger.error(f"❌ Failed to generate invoice PDF {invoice.invoice_number}: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate invoice PDF") from e

    headers = {
        "Content-Disposition": f"inline; filename=invoice-{invoice.invoice_number}.pdf",
        "Cache-Control": "no-cache, must-revalidate",
    }
    return Response(content=pdf_bytes, media_type="application/pdf", headers=headers)


@finances_router.get("/dashboard")
async def get_finances_dashboard(
    timeframe: Literal["7d", "30d", "90d", "1y"] = Query("30d", alias="period"),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.get_dashboard(timeframe)
