"""Payment service - Business logic for recording payments"""

import logging
import math
from datetime import date
from typing import Callable, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ...models import BookingStatus, Payment
from ...services.cascades import BookingSnapshot, on_booking_changed
from ...shared.exceptions import NotFoundError, StaleWriteError, ValidationError
from ..bookings.repository import BookingRepository
from ..bookings.status import derive_payment_status
from .repository import COMPLETED, PaymentRepository
from .schemas import PaymentCreate

logger = logging.getLogger(__name__)


class PaymentService:
    """Service layer for payment business logic"""

    def __init__(self, db: Session, today: Callable[[], date] = date.today):
        self.db = db
        self.today = today
        self.repo = PaymentRepository()
        self.booking_repo = BookingRepository()

    def get_payment(self, payment_id: int) -> Payment:
        payment = self.repo.get_payment_by_id(self.db, payment_id)
        if not payment:
            raise NotFoundError("Payment", payment_id)
        return payment

    def get_payments(
        self,
        booking_id: Optional[int] = None,
        customer_id: Optional[int] = None,
        page: int = 1,
        limit: int = 50,
    ) -> dict:
        payments, total = self.repo.get_payments(self.db, booking_id, customer_id, page, limit)
        return {
            "data": payments,
            "total": total,
            "page": page,
            "pages": math.ceil(total / limit) if limit else 1,
        }

    def record_payment(self, data: PaymentCreate) -> Payment:
        """
        Add a receipt to a booking.

        The booking's amount_paid is bumped under its version guard together
        with the payment row, so a concurrent booking edit turns this into a
        StaleWriteError instead of a lost update. The customer's total_spent
        follows as a post-commit delta.
        """
        booking = self.booking_repo.get_booking_by_id(self.db, data.bookingId)
        if not booking:
            raise NotFoundError("Booking", data.bookingId)
        if booking.status == BookingStatus.CANCELLED:
            raise ValidationError("Cannot record a payment against a cancelled booking")
        if data.version is not None and data.version != booking.version:
            raise StaleWriteError("Booking", booking.id, booking.version)

        before = BookingSnapshot.of(booking)

        payment = Payment(
            booking_id=booking.id,
            customer_id=booking.customer_id,
            amount=data.amount,
            mode=data.mode,
            status=COMPLETED,
            transaction_id=data.transactionId,
            receipt_url=data.receiptUrl,
            notes=data.notes,
        )
        self.db.add(payment)
        booking.amount_paid = round((booking.amount_paid or 0) + data.amount, 2)
        booking.payment_status = derive_payment_status(booking.amount, booking.amount_paid, booking.status)

        try:
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            current = self.booking_repo.current_version(self.db, before.id)
            logger.warning(f"⚠️ Payment on booking {before.id} lost a race with another edit (now v{current})")
            raise StaleWriteError("Booking", before.id, current)

        self.db.refresh(payment)
        logger.info(
            f"💳 Payment {payment.id}: {data.amount} ({data.mode}) on booking {booking.id} → {booking.payment_status}"
        )

        on_booking_changed(self.db, booking, before)
        return payment

    def get_stats(self) -> dict:
        return {
            "totalCollected": round(self.repo.total_collected(self.db), 2),
            "pending": round(self.repo.pending_dues(self.db), 2),
            # Balance still owed on bookings whose term has already ended
            "overdue": round(self.repo.pending_dues(self.db, ended_before=self.today()), 2),
        }
