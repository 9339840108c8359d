"""Customer repository - Database operations for customers"""

from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ...models import Address, Customer, Order


class CustomerRepository:
    """Repository for customer database operations"""

    @staticmethod
    def get_customers_with_orders(db: Session) -> list[Customer]:
        return (
            db.query(Customer)
            .options(selectinload(Customer.orders))
            .order_by(Customer.created_at.desc())
            .all()
        )

    @staticmethod
    def get_customer_by_id(db: Session, customer_id: int) -> Optional[Customer]:
        return db.query(Customer).filter(Customer.id == customer_id).first()

    @staticmethod
    def get_customer_by_email(db: Session, email: str) -> Optional[Customer]:
        return db.query(Customer).filter(Customer.email == email).first()

    @staticmethod
    def create_customer(db: Session, addresses: list[dict], **customer_data) -> Customer:
        customer = Customer(**customer_data)
        customer.addresses = [Address(**address) for address in addresses]
        db.add(customer)
        db.commit()
        db.refresh(customer)
        return customer

    @staticmethod
    def update_customer(db: Session, customer: Customer, **updates) -> Customer:
        for key, value in updates.items():
            if value is not None and hasattr(customer, key):
                setattr(customer, key, value)
        db.commit()
        db.refresh(customer)
        return customer

    @staticmethod
    def count_orders(db: Session, customer_id: int) -> int:
        return db.query(Order).filter(Order.customer_id == customer_id).count()

    @staticmethod
    def delete_customer(db: Session, customer: Customer) -> None:
        db.delete(customer)
        db.commit()
