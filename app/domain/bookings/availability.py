"""
Availability & conflict resolution for media bookings.

Two bookings on the same media unit conflict when their closed date intervals
intersect: ``a.start <= b.end and a.end >= b.start``. Touching endpoints
(one booking ends on the day the next starts) count as a conflict.

Only bookings that still hold the media unit are considered: deleted
bookings and cancelled bookings never block new ones.

The check is a plain query with no locking. Two concurrent requests for the
same dates can both pass it; the later commit wins and the overlap is visible
afterwards in availability reports.
"""

from datetime import date
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ...models import Booking, BookingStatus


def intervals_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    return a_start <= b_end and a_end >= b_start


def holds_media(booking: Booking) -> bool:
    """True when the booking still occupies its media unit"""
    return not booking.deleted and booking.status != BookingStatus.CANCELLED


def first_conflict(
    candidates: Iterable[Booking],
    start: date,
    end: date,
    exclude_booking_id: Optional[int] = None,
) -> Optional[Booking]:
    """Pure variant of find_conflict over an in-memory collection"""
    for candidate in candidates:
        if exclude_booking_id is not None and candidate.id == exclude_booking_id:
            continue
        if not holds_media(candidate):
            continue
        if intervals_overlap(candidate.start_date, candidate.end_date, start, end):
            return candidate
    return None


def _blocking_query(
    db: Session,
    media_id: int,
    start: date,
    end: date,
    exclude_booking_id: Optional[int] = None,
):
    query = db.query(Booking).filter(
        Booking.media_id == media_id,
        Booking.deleted.is_(False),
        Booking.status != BookingStatus.CANCELLED,
        Booking.start_date <= end,
        Booking.end_date >= start,
    )
    if exclude_booking_id is not None:
        query = query.filter(Booking.id != exclude_booking_id)
    return query.order_by(Booking.start_date.asc(), Booking.id.asc())


def find_conflict(
    db: Session,
    media_id: int,
    start: date,
    end: date,
    exclude_booking_id: Optional[int] = None,
) -> Optional[Booking]:
    """
    Return one booking that blocks ``[start, end]`` on ``media_id``, or None.

    Callers must validate ``start <= end`` first. ``exclude_booking_id`` lets
    an edited booking ignore its own current interval.
    """
    return _blocking_query(db, media_id, start, end, exclude_booking_id).first()


def find_conflicts(db: Session, media_id: int, start: date, end: date) -> list[Booking]:
    """Every booking holding ``media_id`` somewhere inside ``[start, end]``"""
    return _blocking_query(db, media_id, start, end).all()
