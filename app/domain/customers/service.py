"""Customer service - CRM analytics and customer CRUD"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from ...database import SessionLocal
from ...email_service import send_welcome_email
from ...models import Customer
from ...shared.exports import csv_response, format_datetime
from ...shared.listing import paginate, sort_records
from .repository import CustomerRepository
from .schemas import CustomerCreate, CustomerUpdate
from .segmentation import CustomerProfile, build_profile, customer_stats, matches_filters

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "name",
    "email",
    "created_at",
    "order_count",
    "total_spent",
    "average_order_value",
    "last_order_date",
    "risk_score",
    "lifetime_value",
}


class CustomerService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CustomerRepository()

    def get_profiles(self, now: Optional[datetime] = None) -> list[CustomerProfile]:
        now = now or datetime.utcnow()
        return [build_profile(c, now) for c in self.repo.get_customers_with_orders(self.db)]

    def list_customers(
        self,
        search: Optional[str] = None,
        segment: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 20,
    ) -> dict:
        """Filtered, sorted page of customer profiles plus stats over every customer"""
        profiles = self.get_profiles()
        filtered = [p for p in profiles if matches_filters(p, search, segment)]

        if sort_by not in SORTABLE_FIELDS:
            raise HTTPException(status_code=400, detail=f"Cannot sort by {sort_by}")
        ordered = sort_records(filtered, sort_by, sort_order)

        items, pagination = paginate(ordered, page, limit)
        return {"customers": items, "pagination": pagination, "stats": customer_stats(profiles)}

    def get_stats(self) -> dict:
        return customer_stats(self.get_profiles())

    def get_customer(self, customer_id: int) -> Customer:
        customer = self.repo.get_customer_by_id(self.db, customer_id)
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")
        return customer

    def get_profile(self, customer_id: int) -> CustomerProfile:
        return build_profile(self.get_customer(customer_id))

    def create_customer(self, data: CustomerCreate) -> Customer:
        if self.repo.get_customer_by_email(self.db, data.email):
            raise HTTPException(status_code=409, detail="A customer with this email already exists")

        logger.info(f"📥 Creating customer {data.email}")
        return self.repo.create_customer(
            self.db,
            addresses=[address.model_dump() for address in data.addresses],
            name=data.name,
            email=data.email,
            phone=data.phone,
            acquisition_channel=data.acquisition_channel,
            notes=data.notes,
        )

    def update_customer(self, customer_id: int, data: CustomerUpdate) -> Customer:
        customer = self.get_customer(customer_id)

        if data.email and data.email != customer.email:
            if self.repo.get_customer_by_email(self.db, data.email):
                raise HTTPException(
                    status_code=409, detail="A customer with this email already exists"
                )

        return self.repo.update_customer(self.db, customer, **data.model_dump(exclude_unset=True))

    def delete_customer(self, customer_id: int) -> None:
        customer = self.get_customer(customer_id)
        if self.repo.count_orders(self.db, customer_id):
            raise HTTPException(
                status_code=400, detail="Cannot delete a customer that has orders"
            )
        self.repo.delete_customer(self.db, customer)
        logger.info(f"🗑️ Deleted customer {customer_id}")

    def export_customers_csv(
        self, search: Optional[str] = None, segment: Optional[str] = None
    ) -> StreamingResponse:
        """Export customers with their CRM metrics as CSV"""
        try:
            profiles = [p for p in self.get_profiles() if matches_filters(p, search, segment)]
            logger.info(f"📊 Exporting {len(profiles)} customers")

            return csv_response(
                "customers",
                [
                    "ID",
                    "Name",
                    "Email",
                    "Phone",
                    "Segment",
                    "Orders",
                    "Total Spent",
                    "Average Order Value",
                    "Lifetime Value",
                    "Risk Score",
                    "Last Order",
                    "Created At",
                ],
                (
                    [
                        p.id,
                        p.name,
                        p.email,
                        p.phone,
                        p.segment,
                        p.order_count,
                        f"{p.total_spent:.2f}",
                        f"{p.average_order_value:.2f}",
                        f"{p.lifetime_value:.2f}",
                        p.risk_score,
                        format_datetime(p.last_order_date),
                        format_datetime(p.created_at),
                    ]
                    for p in profiles
                ),
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"❌ Customer CSV export failed: {e}")
            raise HTTPException(status_code=500, detail="Failed to export customers") from e


def send_customer_welcome(customer_id: int) -> None:
    """Background task: welcome email for a newly registered customer"""
    db = SessionLocal()
    try:
        customer = db.query(Customer).filter(Customer.id == customer_id).first()
        if customer and send_welcome_email(customer):
            logger.info(f"📧 Welcome email sent to {customer.email}")
        elif customer:
            logger.warning(f"⚠️ Welcome email to {customer.email} was not sent")
    except Exception as e:
        logger.error(f"❌ Error sending welcome email to customer {customer_id}: {e}")
    finally:
        db.close()
