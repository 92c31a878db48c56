"""Customer repository - Database operations for customers"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Customer


class CustomerRepository:
    """Repository for customer database operations"""

    @staticmethod
    def get_customer_by_id(db: Session, customer_id: int, include_deleted: bool = False) -> Optional[Customer]:
        query = db.query(Customer).filter(Customer.id == customer_id)
        if not include_deleted:
            query = query.filter(Customer.deleted.is_(False))
        return query.first()

    @staticmethod
    def search_customers(
        db: Session,
        group: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> tuple[list[Customer], int]:
        query = db.query(Customer).filter(Customer.deleted.is_(False))

        if group:
            query = query.filter(Customer.customer_group == group)

        if search:
            search_term = f"%{search.lower()}%"
            query = query.filter(
                (Customer.name.ilike(search_term))
                | (Customer.company.ilike(search_term))
                | (Customer.email.ilike(search_term))
            )

        total = query.count()
        items = (
            query.order_by(Customer.created_at.desc(), Customer.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    @staticmethod
    def create_customer(db: Session, **customer_data) -> Customer:
        customer = Customer(**customer_data)
        db.add(customer)
        db.commit()
        db.refresh(customer)
        return customer

    @staticmethod
    def update_customer(db: Session, customer: Customer, **updates) -> Customer:
        """Update profile fields; the financial counters belong to the ledger"""
        for key, value in updates.items():
            if key in ("total_bookings", "total_spent"):
                continue
            if value is not None and hasattr(customer, key):
                setattr(customer, key, value)

        db.commit()
        db.refresh(customer)
        return customer
