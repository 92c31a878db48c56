"""
Customer financial ledger.

``total_bookings`` and ``total_spent`` are running counters. Every change is a
single ``UPDATE customers SET col = col + :delta`` so concurrent bookings for
the same customer never lose an update, whatever the caller has cached.
"""

import logging

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from ...models import Booking, Customer
from ...shared.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class CustomerLedger:
    """Atomic counter maintenance for customer totals"""

    def __init__(self, db: Session):
        self.db = db

    def _increment(self, customer_id: int, bookings: int = 0, spent: float = 0.0) -> None:
        values = {}
        if bookings:
            values["total_bookings"] = Customer.total_bookings + bookings
        if spent:
            values["total_spent"] = Customer.total_spent + spent
        if not values:
            return

        result = self.db.execute(
            update(Customer)
            .where(Customer.id == customer_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise NotFoundError("Customer", customer_id)
        self.db.commit()

    def record_booking_created(self, customer_id: int, amount_paid: float) -> None:
        """A new booking counts once and contributes its initial payment"""
        self._increment(customer_id, bookings=1, spent=amount_paid or 0)
        logger.info(f"💰 Customer {customer_id}: +1 booking, +{amount_paid or 0} spent")

    def apply_payment_delta(self, customer_id: int, delta: float) -> None:
        """Shift total_spent by the change in a booking's amount_paid"""
        if not delta:
            return
        self._increment(customer_id, spent=delta)
        logger.info(f"💰 Customer {customer_id}: total_spent {'+' if delta > 0 else ''}{delta}")

    def record_booking_deleted(self, customer_id: int, amount_paid: float) -> None:
        self._increment(customer_id, bookings=-1, spent=-(amount_paid or 0))
        logger.info(f"💰 Customer {customer_id}: -1 booking, -{amount_paid or 0} spent")

    def transfer_booking(
        self, from_customer_id: int, to_customer_id: int, old_paid: float, new_paid: float
    ) -> None:
        """A booking was reassigned to another customer"""
        self.record_booking_deleted(from_customer_id, old_paid)
        self.record_booking_created(to_customer_id, new_paid)

    def recompute(self, customer_id: int) -> Customer:
        """
        Rebuild both counters from the customer's non-deleted bookings.

        Operator-triggered repair for counters that drifted after a failed
        follow-up step.
        """
        customer = self.db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            raise NotFoundError("Customer", customer_id)

        count, spent = (
            self.db.query(func.count(Booking.id), func.coalesce(func.sum(Booking.amount_paid), 0))
            .filter(Booking.customer_id == customer_id, Booking.deleted.is_(False))
            .one()
        )

        if customer.total_bookings != count or round(customer.total_spent or 0, 2) != round(spent, 2):
            logger.warning(
                f"⚠️ Customer {customer_id} counters drifted: "
                f"bookings {customer.total_bookings} → {count}, spent {customer.total_spent} → {spent}"
            )
        customer.total_bookings = count
        customer.total_spent = float(spent)
        self.db.commit()
        self.db.refresh(customer)
        return customer
