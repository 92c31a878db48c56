"""Booking repository - Database operations for bookings"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Booking, BookingStatus


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_booking_by_id(db: Session, booking_id: int, include_deleted: bool = False) -> Optional[Booking]:
        """Load the full booking record together with its media and customer"""
        query = (
            db.query(Booking)
            .options(joinedload(Booking.media), joinedload(Booking.customer))
            .filter(Booking.id == booking_id)
        )
        if not include_deleted:
            query = query.filter(Booking.deleted.is_(False))
        return query.first()

    @staticmethod
    def get_bookings(
        db: Session,
        customer_id: Optional[int] = None,
        media_id: Optional[int] = None,
        status: Optional[str] = None,
        payment_status: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> tuple[list[Booking], int]:
        query = db.query(Booking).filter(Booking.deleted.is_(False))

        if customer_id is not None:
            query = query.filter(Booking.customer_id == customer_id)
        if media_id is not None:
            query = query.filter(Booking.media_id == media_id)
        if status:
            query = query.filter(Booking.status == status)
        if payment_status:
            query = query.filter(Booking.payment_status == payment_status)

        total = query.count()
        items = (
            query.options(joinedload(Booking.media), joinedload(Booking.customer))
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    @staticmethod
    def get_live_bookings(db: Session) -> list[Booking]:
        """Bookings whose status can still move with the calendar"""
        return (
            db.query(Booking)
            .filter(
                Booking.deleted.is_(False),
                Booking.status.in_([BookingStatus.UPCOMING, BookingStatus.ACTIVE]),
            )
            .all()
        )

    @staticmethod
    def create_booking(db: Session, **booking_data) -> Booking:
        booking = Booking(**booking_data)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def current_version(db: Session, booking_id: int) -> Optional[int]:
        return db.query(Booking.version).filter(Booking.id == booking_id).scalar()
