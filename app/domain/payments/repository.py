"""Payment repository - Database operations for payments"""

from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Booking, BookingStatus, Payment, PaymentStatus

COMPLETED = "Completed"


class PaymentRepository:
    """Repository for payment database operations"""

    @staticmethod
    def get_payment_by_id(db: Session, payment_id: int) -> Optional[Payment]:
        return db.query(Payment).filter(Payment.id == payment_id).first()

    @staticmethod
    def get_payments(
        db: Session,
        booking_id: Optional[int] = None,
        customer_id: Optional[int] = None,
        page: int = 1,
        limit: int = 50,
    ) -> tuple[list[Payment], int]:
        query = db.query(Payment)
        if booking_id is not None:
            query = query.filter(Payment.booking_id == booking_id)
        if customer_id is not None:
            query = query.filter(Payment.customer_id == customer_id)

        total = query.count()
        items = (
            query.order_by(Payment.created_at.desc(), Payment.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    @staticmethod
    def total_collected(db: Session) -> float:
        """Completed payments whose booking is neither cancelled nor deleted"""
        total = (
            db.query(func.coalesce(func.sum(Payment.amount), 0))
            .join(Booking, Payment.booking_id == Booking.id)
            .filter(
                Payment.status == COMPLETED,
                Booking.deleted.is_(False),
                Booking.status != BookingStatus.CANCELLED,
            )
            .scalar()
        )
        return float(total or 0)

    @staticmethod
    def pending_dues(db: Session, ended_before: Optional[date] = None) -> float:
        """Outstanding balance of unpaid bookings, optionally only those whose term has ended"""
        query = db.query(func.coalesce(func.sum(Booking.amount - Booking.amount_paid), 0)).filter(
            Booking.deleted.is_(False),
            Booking.status != BookingStatus.CANCELLED,
            Booking.payment_status.in_([PaymentStatus.PENDING, PaymentStatus.PARTIALLY_PAID]),
        )
        if ended_before is not None:
            query = query.filter(Booking.end_date < ended_before)
        total = query.scalar()
        return float(total or 0)
