"""
Human readable booking references: ``SRA/{FY}/{SEQ}``.

FY is the Indian financial year holding the booking's start date (creation
date as fallback). SEQ is ``1000 + rank + 1`` where rank is the booking's
position when every booking ever created, deleted ones included, is sorted by
start date. References are computed on read and never stored, so every view
must build them from the same global ordering.
"""

from datetime import date
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ...config import BOOKING_ID_PREFIX, BOOKING_SEQUENCE_BASE
from ...models import Booking
from ...shared.dates import financial_year_label, to_date


def _anchor_date(start_date, created_at) -> Optional[date]:
    return to_date(start_date) or to_date(created_at)


def format_booking_reference(start_date, created_at, index: int) -> str:
    fy = financial_year_label(_anchor_date(start_date, created_at))
    sequence = BOOKING_SEQUENCE_BASE + index + 1 if index >= 0 else "0000"
    return f"{BOOKING_ID_PREFIX}/{fy}/{sequence}"


def build_reference_map(rows: Iterable[tuple]) -> dict[int, str]:
    """
    Map booking id -> reference from ``(id, start_date, created_at)`` rows.

    Ties on the anchor date are broken by id so the sequence is stable.
    """
    ordered = sorted(
        rows,
        key=lambda row: (_anchor_date(row[1], row[2]) or date.max, row[0]),
    )
    return {
        booking_id: format_booking_reference(start_date, created_at, index)
        for index, (booking_id, start_date, created_at) in enumerate(ordered)
    }


def load_reference_map(db: Session) -> dict[int, str]:
    rows = db.query(Booking.id, Booking.start_date, Booking.created_at).all()
    return build_reference_map(rows)


def booking_reference(db: Session, booking_id: int) -> Optional[str]:
    return load_reference_map(db).get(booking_id)


def parse_booking_reference(reference: str) -> tuple[str, int]:
    """Split ``SRA/2425/1042`` into ``("2425", 1042)``"""
    parts = reference.strip().split("/")
    if len(parts) != 3 or parts[0] != BOOKING_ID_PREFIX:
        raise ValueError(f"Not a booking reference: {reference}")
    return parts[1], int(parts[2])


__all__ = [
    "format_booking_reference",
    "build_reference_map",
    "load_reference_map",
    "booking_reference",
    "parse_booking_reference",
]
