"""Booking service - Business logic for the booking lifecycle"""

import logging
import math
from datetime import date
from typing import Callable, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ...models import Booking, BookingStatus
from ...services.cascades import (
    BookingSnapshot,
    booking_deleted_steps,
    on_booking_changed,
    run_cascades,
)
from ...shared.dates import utcnow
from ...shared.exceptions import BookingConflictError, NotFoundError, StaleWriteError, ValidationError
from ..customers.repository import CustomerRepository
from ..media.repository import MediaRepository
from .availability import find_conflict
from .identifiers import load_reference_map, parse_booking_reference
from .repository import BookingRepository
from .schemas import BookingCreate, BookingUpdate
from .status import derive_payment_status, derive_status

logger = logging.getLogger(__name__)


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session, today: Callable[[], date] = date.today):
        self.db = db
        self.today = today
        self.repo = BookingRepository()
        self.media_repo = MediaRepository()
        self.customer_repo = CustomerRepository()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_booking(self, booking_id: int) -> Booking:
        booking = self.repo.get_booking_by_id(self.db, booking_id)
        if not booking:
            raise NotFoundError("Booking", booking_id)
        return booking

    def get_bookings(self, page: int = 1, limit: int = 50, **filters) -> dict:
        bookings, total = self.repo.get_bookings(self.db, page=page, limit=limit, **filters)
        return {
            "data": bookings,
            "total": total,
            "page": page,
            "pages": math.ceil(total / limit) if limit else 1,
        }

    def get_booking_by_reference(self, reference: str) -> Booking:
        try:
            parse_booking_reference(reference)
        except ValueError as e:
            raise ValidationError(str(e))

        for booking_id, ref in load_reference_map(self.db).items():
            if ref == reference:
                return self.get_booking(booking_id)
        raise NotFoundError("Booking", reference)

    def reference_map(self) -> dict[int, str]:
        return load_reference_map(self.db)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def _ensure_media(self, media_id: int):
        media = self.media_repo.get_media_by_id(self.db, media_id)
        if not media:
            raise NotFoundError("Media", media_id)
        return media

    def _ensure_customer(self, customer_id: int):
        customer = self.customer_repo.get_customer_by_id(self.db, customer_id)
        if not customer:
            raise NotFoundError("Customer", customer_id)
        return customer

    def _reject_conflict(
        self, media_id: int, start: date, end: date, exclude_booking_id: Optional[int] = None
    ) -> None:
        conflict = find_conflict(self.db, media_id, start, end, exclude_booking_id)
        if conflict:
            reference = load_reference_map(self.db).get(conflict.id)
            logger.warning(
                f"⚠️ Media {media_id} {start}..{end} conflicts with booking {conflict.id} ({reference})"
            )
            raise BookingConflictError(conflict.id, reference)

    def create_booking(self, data: BookingCreate) -> Booking:
        """Conflict check, derive status, commit, then run follow-up steps"""
        if data.startDate > data.endDate:
            raise ValidationError("Start date must be on or before end date")

        self._ensure_media(data.mediaId)
        self._ensure_customer(data.customerId)
        self._reject_conflict(data.mediaId, data.startDate, data.endDate)

        status = derive_status(data.startDate, data.endDate, today=self.today())
        booking = self.repo.create_booking(
            self.db,
            media_id=data.mediaId,
            customer_id=data.customerId,
            start_date=data.startDate,
            end_date=data.endDate,
            status=status,
            amount=data.amount,
            amount_paid=data.amountPaid,
            payment_status=derive_payment_status(data.amount, data.amountPaid, status),
            payment_mode=data.paymentMode,
            notes=data.notes,
        )
        logger.info(f"✅ Booking {booking.id} created on media {booking.media_id} ({status})")

        on_booking_changed(self.db, booking)
        self.db.refresh(booking)
        return booking

    def _resolve_status(self, booking: Booking, data: BookingUpdate, start: date, end: date) -> str:
        dates_changed = start != booking.start_date or end != booking.end_date
        if data.status is not None and data.autoStatus is not True:
            # Manual override wins for this edit
            return data.status
        if data.autoStatus is True or (data.autoStatus is None and dates_changed):
            return derive_status(start, end, booking.status, self.today())
        return booking.status

    def update_booking(self, booking_id: int, data: BookingUpdate) -> Booking:
        """
        Apply a partial edit under optimistic locking.

        The full record is read, edited in memory and flushed with
        ``WHERE version = :read_version``. A concurrent edit in between
        surfaces as StaleWriteError.
        """
        booking = self.get_booking(booking_id)
        if data.version is not None and data.version != booking.version:
            logger.warning(
                f"⚠️ Stale write on booking {booking_id}: sent v{data.version}, stored v{booking.version}"
            )
            raise StaleWriteError("Booking", booking_id, booking.version)

        before = BookingSnapshot.of(booking)

        new_start = data.startDate if data.startDate is not None else booking.start_date
        new_end = data.endDate if data.endDate is not None else booking.end_date
        if new_start > new_end:
            raise ValidationError("Start date must be on or before end date")
        new_media_id = data.mediaId if data.mediaId is not None else booking.media_id

        if data.mediaId is not None and data.mediaId != booking.media_id:
            self._ensure_media(data.mediaId)
        if data.customerId is not None and data.customerId != booking.customer_id:
            self._ensure_customer(data.customerId)

        new_status = self._resolve_status(booking, data, new_start, new_end)
        dates_changed = new_start != booking.start_date or new_end != booking.end_date
        media_changed = new_media_id != booking.media_id
        reopening = booking.status == BookingStatus.CANCELLED
        if new_status != BookingStatus.CANCELLED and (dates_changed or media_changed or reopening):
            self._reject_conflict(new_media_id, new_start, new_end, exclude_booking_id=booking.id)

        booking.media_id = new_media_id
        booking.start_date = new_start
        booking.end_date = new_end
        if data.customerId is not None:
            booking.customer_id = data.customerId
        if data.amount is not None:
            booking.amount = data.amount
        if data.amountPaid is not None:
            booking.amount_paid = data.amountPaid
        if data.paymentMode is not None:
            booking.payment_mode = data.paymentMode
        if data.notes is not None:
            booking.notes = data.notes

        booking.status = new_status
        booking.payment_status = derive_payment_status(booking.amount, booking.amount_paid, booking.status)

        self._commit_versioned(booking_id)
        self.db.refresh(booking)
        if booking.status != before.status:
            logger.info(f"🔄 Booking {booking_id} status: {before.status} → {booking.status}")

        on_booking_changed(self.db, booking, before)
        self.db.refresh(booking)
        return booking

    def _commit_versioned(self, booking_id: int) -> None:
        try:
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            current = self.repo.current_version(self.db, booking_id)
            logger.warning(f"⚠️ Booking {booking_id} changed underneath this edit (now v{current})")
            raise StaleWriteError("Booking", booking_id, current)

    def cancel_booking(self, booking_id: int, version: Optional[int] = None, reason: Optional[str] = None) -> Booking:
        notes = None
        if reason:
            booking = self.get_booking(booking_id)
            notes = f"{booking.notes}\nCancelled: {reason}" if booking.notes else f"Cancelled: {reason}"
        return self.update_booking(
            booking_id, BookingUpdate(version=version, status=BookingStatus.CANCELLED, notes=notes)
        )

    def delete_booking(self, booking_id: int) -> dict:
        """Soft delete, then release the media unit and the customer's counters"""
        booking = self.get_booking(booking_id)
        snapshot = BookingSnapshot.of(booking)

        booking.mark_deleted(utcnow())
        self._commit_versioned(booking_id)
        logger.info(f"🗑️ Booking {booking_id} moved to recycle bin")

        run_cascades(self.db, f"booking {booking_id}", booking_deleted_steps(self.db, snapshot))
        return {"message": "Booking deleted"}

    def refresh_statuses(self) -> dict:
        """
        Re-derive status for Upcoming/Active bookings as the calendar moves on.

        Each changed booking commits on its own and resyncs its media unit.
        """
        summary = {"upcoming_to_active": 0, "to_completed": 0, "total_updated": 0}
        today = self.today()

        for booking in self.repo.get_live_bookings(self.db):
            new_status = derive_status(booking.start_date, booking.end_date, booking.status, today)
            if new_status == booking.status:
                continue

            before = BookingSnapshot.of(booking)
            booking.status = new_status
            try:
                self._commit_versioned(booking.id)
            except StaleWriteError:
                # Edited concurrently; the editor's commit re-derives anyway
                logger.info(f"ℹ️ Skipped booking {before.id}: modified during status automation")
                continue

            if new_status == BookingStatus.ACTIVE:
                summary["upcoming_to_active"] += 1
            else:
                summary["to_completed"] += 1
            logger.info(f"✅ Booking {before.id} transitioned: {before.status} → {new_status}")
            on_booking_changed(self.db, booking, before)

        summary["total_updated"] = summary["upcoming_to_active"] + summary["to_completed"]
        if summary["total_updated"]:
            logger.info(f"📊 Status automation summary: {summary}")
        return summary
