"""Customer service - Business logic for customer operations"""

import logging
import math
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Customer
from ...shared.dates import utcnow
from ...shared.exceptions import NotFoundError
from .ledger import CustomerLedger
from .repository import CustomerRepository
from .schemas import CustomerCreate, CustomerUpdate

logger = logging.getLogger(__name__)


class CustomerService:
    """Service layer for customer business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CustomerRepository()
        self.ledger = CustomerLedger(db)

    def get_customers(
        self,
        group: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> dict:
        customers, total = self.repo.search_customers(self.db, group, search, page, limit)
        return {
            "data": customers,
            "total": total,
            "page": page,
            "pages": math.ceil(total / limit) if limit else 1,
        }

    def get_customer(self, customer_id: int) -> Customer:
        customer = self.repo.get_customer_by_id(self.db, customer_id)
        if not customer:
            raise NotFoundError("Customer", customer_id)
        return customer

    def create_customer(self, data: CustomerCreate) -> Customer:
        logger.info(f"📥 Creating customer: {data.company or data.name}")
        return self.repo.create_customer(
            self.db,
            name=data.name,
            company=data.company,
            email=data.email,
            phone=data.phone,
            customer_group=data.group,
            address=data.address,
            gstin=data.gstin,
            total_bookings=0,
            total_spent=0,
        )

    def update_customer(self, customer_id: int, data: CustomerUpdate) -> Customer:
        customer = self.get_customer(customer_id)

        updates = {}
        if data.name is not None:
            updates["name"] = data.name
        if data.company is not None:
            updates["company"] = data.company
        if data.email is not None:
            updates["email"] = data.email
        if data.phone is not None:
            updates["phone"] = data.phone
        if data.group is not None:
            updates["customer_group"] = data.group
        if data.address is not None:
            updates["address"] = data.address
        if data.gstin is not None:
            updates["gstin"] = data.gstin

        return self.repo.update_customer(self.db, customer, **updates)

    def delete_customer(self, customer_id: int) -> dict:
        """Soft delete - the customer's bookings stay as they are"""
        customer = self.get_customer(customer_id)
        customer.mark_deleted(utcnow())
        self.db.commit()
        logger.info(f"🗑️ Customer {customer_id} moved to recycle bin")
        return {"message": "Customer deleted"}

    def reconcile_customer(self, customer_id: int) -> Customer:
        self.get_customer(customer_id)
        return self.ledger.recompute(customer_id)
