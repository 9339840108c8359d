"""Invoice service - invoicing orders and the financial dashboard"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session, selectinload

from ...config import DEFAULT_TAX_RATE
from ...models import Order, OrderItem
from ...models_invoice import Invoice
from ...settings_store import get_json_setting, get_settings_map
from ...shared.exports import csv_response, format_datetime
from ...shared.listing import paginate
from .schemas import InvoiceCreate, InvoiceResponse, InvoiceUpdate

logger = logging.getLogger(__name__)

PAYMENT_DAYS = 30

DEFAULT_COMPANY = {
    "name": "Storefront Personalizados",
    "address": {
        "street": "Calle Principal 123",
        "city": "Madrid",
        "postal_code": "28001",
        "country": "España",
    },
    "tax_id": "B12345678",
    "phone": "+34 900 000 000",
    "email": "facturacion@storefront.es",
}

TIMEFRAMES = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}


def to_response(invoice: Invoice) -> InvoiceResponse:
    response = InvoiceResponse.model_validate(invoice)
    order_number = invoice.order.order_number if invoice.order else None
    return response.model_copy(update={"order_number": order_number})


def next_invoice_number(db: Session, year: int) -> str:
    """Continue the highest YYYY-NNNN number issued this year"""
    last = (
        db.query(Invoice)
        .filter(Invoice.invoice_number.like(f"{year}-%"))
        .order_by(Invoice.invoice_number.desc())
        .first()
    )
    sequence = 1
    if last:
        try:
            sequence = int(last.invoice_number.split("-")[1]) + 1
        except (IndexError, ValueError):
            logger.warning(f"⚠️ Unparseable invoice number {last.invoice_number}")
    return f"{year}-{sequence:04d}"


def get_company_settings(db: Session) -> dict:
    values = get_settings_map(db, ["company_name", "company_tax_id", "company_phone", "company_email"])
    return {
        "name": values.get("company_name") or DEFAULT_COMPANY["name"],
        "address": get_json_setting(db, "company_address", DEFAULT_COMPANY["address"]),
        "tax_id": values.get("company_tax_id") or DEFAULT_COMPANY["tax_id"],
        "phone": values.get("company_phone") or DEFAULT_COMPANY["phone"],
        "email": values.get("company_email") or DEFAULT_COMPANY["email"],
    }


class InvoiceService:
    def __init__(self, db: Session):
        self.db = db

    def list_invoices(
        self, status: Optional[str] = None, page: int = 1, limit: int = 20
    ) -> tuple[list[Invoice], dict]:
        query = self.db.query(Invoice).options(selectinload(Invoice.order))
        if status and status != "all":
            query = query.filter(Invoice.status == status)
        query = query.order_by(Invoice.issue_date.desc(), Invoice.id.desc())
        return paginate(query, page, limit)

    def get_invoice(self, invoice_id: int) -> Invoice:
        invoice = self.db.query(Invoice).filter(Invoice.id == invoice_id).first()
        if not invoice:
            raise HTTPException(status_code=404, detail="Invoice not found")
        return invoice

    def create_invoice(self, data: InvoiceCreate) -> Invoice:
        order = (
            self.db.query(Order)
            .options(
                selectinload(Order.items).selectinload(OrderItem.product),
                selectinload(Order.items).selectinload(OrderItem.variant),
            )
            .filter(Order.id == data.order_id)
            .first()
        )
        if not order:
            raise HTTPException(status_code=404, detail="Order not found")
        if order.invoice:
            raise HTTPException(status_code=400, detail="This order already has an invoice")

        now = datetime.utcnow()
        company = get_company_settings(self.db)

        subtotal = round((order.total_amount or 0) - (order.tax_amount or 0), 2)
        tax_amount = order.tax_amount or round(subtotal * DEFAULT_TAX_RATE, 2)

        invoice = Invoice(
            order_id=order.id,
            invoice_number=next_invoice_number(self.db, now.year),
            status="PENDING",
            subtotal=subtotal,
            tax_rate=DEFAULT_TAX_RATE,
            tax_amount=tax_amount,
            total_amount=round(subtotal + tax_amount, 2),
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            customer_phone=order.customer_phone,
            billing_address=order.shipping_address,
            company_name=company["name"],
            company_address=company["address"],
            company_tax_id=company["tax_id"],
            company_phone=company["phone"],
            company_email=company["email"],
            line_items=[
                {
                    "product_name": item.product.name if item.product else "Product",
                    "variant_name": item.variant.display_name if item.variant else None,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price,
                    "total_price": item.total_price,
                }
                for item in order.items
            ],
            payment_terms=data.payment_terms or f"{PAYMENT_DAYS} days",
            notes=data.notes,
            issue_date=now,
            due_date=now + timedelta(days=PAYMENT_DAYS),
        )
        self.db.add(invoice)
        self.db.commit()
        self.db.refresh(invoice)
        logger.info(f"🧾 Invoice {invoice.invoice_number} created for order {order.order_number}")
        return invoice

    def update_invoice(self, invoice_id: int, data: InvoiceUpdate) -> Invoice:
        invoice = self.get_invoice(invoice_id)
        updates = data.model_dump(exclude_unset=True)
        for key, value in updates.items():
            setattr(invoice, key, value)

        if updates.get("status") == "PAID" and not invoice.paid_at:
            invoice.paid_at = datetime.utcnow()

        self.db.commit()
        self.db.refresh(invoice)
        logger.info(f"✅ Invoice {invoice.invoice_number} updated: {invoice.status}")
        return invoice

    def export_invoices(self, status: Optional[str] = None):
        try:
            query = self.db.query(Invoice).options(selectinload(Invoice.order))
            if status and status != "all":
                query = query.filter(Invoice.status == status)
            invoices = query.order_by(Invoice.invoice_number.asc()).all()

            header = [
                "Invoice",
                "Order",
                "Status",
                "Customer",
                "Email",
                "Subtotal",
                "Tax",
                "Total",
                "Issued",
                "Due",
                "Paid",
            ]
            rows = [
                [
                    i.invoice_number,
                    i.order.order_number if i.order else "",
                    i.status,
                    i.customer_name,
                    i.customer_email,
                    f"{i.subtotal:.2f}",
                    f"{i.tax_amount:.2f}",
                    f"{i.total_amount:.2f}",
                    format_datetime(i.issue_date),
                    format_datetime(i.due_date),
                    format_datetime(i.paid_at),
                ]
                for i in invoices
            ]
            return csv_response("invoices", header, rows)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"❌ Failed to export invoices: {e}")
            raise HTTPException(status_code=500, detail="Failed to export invoices") from e

    def get_dashboard(self, timeframe: str = "30d", now: Optional[datetime] = None) -> dict:
        """Revenue and receivables over the selected timeframe"""
        now = now or datetime.utcnow()
        days = TIMEFRAMES.get(timeframe)
        if days is None:
            raise HTTPException(status_code=400, detail=f"Unknown timeframe {timeframe}")
        start = now - timedelta(days=days)

        orders = (
            self.db.query(Order)
            .filter(Order.status != "CANCELLED", Order.created_at >= start, Order.created_at <= now)
            .all()
        )
        invoices = (
            self.db.query(Invoice)
            .filter(Invoice.issue_date >= start, Invoice.issue_date <= now)
            .all()
        )

        revenue = sum(o.total_amount or 0 for o in orders)
        active = [i for i in invoices if i.status != "CANCELLED"]
        invoiced = sum(i.total_amount for i in active)
        paid = sum(i.total_amount for i in active if i.status == "PAID")
        pending = [i for i in active if i.status in ("PENDING", "OVERDUE")]
        overdue = [
            i for i in pending if i.status == "OVERDUE" or (i.due_date and i.due_date < now)
        ]

        monthly: dict[str, dict] = defaultdict(lambda: {"revenue": 0.0, "orders": 0})
        for order in orders:
            if order.created_at:
                bucket = monthly[order.created_at.strftime("%Y-%m")]
                bucket["revenue"] += order.total_amount or 0
                bucket["orders"] += 1

        return {
            "timeframe": timeframe,
            "revenue": round(revenue, 2),
            "order_count": len(orders),
            "average_order_value": round(revenue / len(orders), 2) if orders else 0,
            "invoiced": round(invoiced, 2),
            "paid": round(paid, 2),
            "outstanding": round(sum(i.total_amount for i in pending), 2),
            "overdue": round(sum(i.total_amount for i in overdue), 2),
            "overdue_count": len(overdue),
            "paid_ratio": round(paid / invoiced * 100, 1) if invoiced else 0,
            "monthly_revenue": [
                {"month": month, "revenue": round(values["revenue"], 2), "orders": values["orders"]}
                for month, values in sorted(monthly.items())
            ],
        }
