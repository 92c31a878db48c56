"""
Post-commit follow-up steps for booking mutations.

A booking write commits first. The steps returned by the ``booking_*_steps``
builders then run one by one, each in its own small transaction:

- calendar sync for the media unit
- media status sync (Booked <-> Available)
- customer counter reconciliation

A failing step is rolled back, logged as a CascadeFailure and skipped; the
remaining steps still run and the caller still sees the booking as saved.
Every step is idempotent or delta-based on values captured before it runs.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from ..domain.customers.ledger import CustomerLedger
from ..domain.media.service import MediaSyncService
from ..models import Booking
from ..shared.exceptions import CascadeFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CascadeStep:
    name: str
    action: Callable[[], Any]


@dataclass(frozen=True)
class BookingSnapshot:
    """Values of a booking as they were before an edit"""

    id: int
    media_id: int
    customer_id: int
    amount_paid: float
    status: str

    @classmethod
    def of(cls, booking: Booking) -> "BookingSnapshot":
        return cls(
            id=booking.id,
            media_id=booking.media_id,
            customer_id=booking.customer_id,
            amount_paid=booking.amount_paid or 0,
            status=booking.status,
        )


def run_cascades(db: Session, subject: str, steps: list[CascadeStep]) -> list[str]:
    """
    Run follow-up steps in order. Returns the names of the steps that failed.
    """
    failed = []
    for step in steps:
        try:
            step.action()
        except Exception as e:
            db.rollback()
            failure = CascadeFailure(step.name, subject, e)
            logger.error(f"❌ {failure.message}", exc_info=True)
            failed.append(step.name)

    if failed:
        logger.error(f"❌ {subject}: {len(failed)} follow-up step(s) failed: {failed}")
    else:
        logger.debug(f"✅ {subject}: {len(steps)} follow-up step(s) completed")
    return failed


def booking_created_steps(db: Session, booking: Booking) -> list[CascadeStep]:
    sync = MediaSyncService(db)
    ledger = CustomerLedger(db)
    after = BookingSnapshot.of(booking)

    return [
        CascadeStep("sync_calendar", lambda: sync.sync_calendar(booking)),
        CascadeStep("sync_media_status", lambda: sync.sync_media_status(after.media_id)),
        CascadeStep(
            "reconcile_customer_totals",
            lambda: ledger.record_booking_created(after.customer_id, after.amount_paid),
        ),
    ]


def booking_updated_steps(
    db: Session, booking: Booking, before: BookingSnapshot
) -> list[CascadeStep]:
    sync = MediaSyncService(db)
    ledger = CustomerLedger(db)
    after = BookingSnapshot.of(booking)

    steps = [CascadeStep("sync_calendar", lambda: sync.sync_calendar(booking))]

    steps.append(CascadeStep("sync_media_status", lambda: sync.sync_media_status(after.media_id)))
    if before.media_id != after.media_id:
        steps.append(
            CascadeStep("sync_previous_media_status", lambda: sync.sync_media_status(before.media_id))
        )

    if before.customer_id != after.customer_id:
        steps.append(
            CascadeStep(
                "transfer_customer_totals",
                lambda: ledger.transfer_booking(
                    before.customer_id, after.customer_id, before.amount_paid, after.amount_paid
                ),
            )
        )
    elif after.amount_paid != before.amount_paid:
        delta = after.amount_paid - before.amount_paid
        steps.append(
            CascadeStep(
                "reconcile_customer_totals",
                lambda: ledger.apply_payment_delta(after.customer_id, delta),
            )
        )

    return steps


def booking_deleted_steps(db: Session, snapshot: BookingSnapshot) -> list[CascadeStep]:
    sync = MediaSyncService(db)
    ledger = CustomerLedger(db)

    return [
        CascadeStep("remove_from_calendar", lambda: sync.remove_from_calendar(snapshot.id)),
        CascadeStep("sync_media_status", lambda: sync.sync_media_status(snapshot.media_id)),
        CascadeStep(
            "reconcile_customer_totals",
            lambda: ledger.record_booking_deleted(snapshot.customer_id, snapshot.amount_paid),
        ),
    ]


def on_booking_changed(
    db: Session,
    booking: Booking,
    before: Optional[BookingSnapshot] = None,
) -> list[str]:
    """Entry point used by booking and payment services after their commit"""
    subject = f"booking {booking.id}"
    if before is None:
        return run_cascades(db, subject, booking_created_steps(db, booking))
    return run_cascades(db, subject, booking_updated_steps(db, booking, before))
