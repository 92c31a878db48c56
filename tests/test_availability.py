from datetime import date
from types import SimpleNamespace

from conftest import make_booking, make_customer, make_media

from app.domain.bookings.availability import find_conflict, find_conflicts, first_conflict, intervals_overlap
from app.models import BookingStatus
from app.shared.dates import utcnow


def _candidate(booking_id, start, end, status=BookingStatus.UPCOMING, deleted=False):
    return SimpleNamespace(id=booking_id, start_date=start, end_date=end, status=status, deleted=deleted)


def test_intervals_overlap_is_closed_on_both_ends():
    jan10, jan20 = date(2024, 1, 10), date(2024, 1, 20)
    assert intervals_overlap(jan10, jan20, date(2024, 1, 15), date(2024, 1, 25))
    # Ending on the day the other starts still overlaps
    assert intervals_overlap(jan10, jan20, jan20, date(2024, 1, 30))
    assert intervals_overlap(jan10, jan20, date(2024, 1, 1), jan10)
    assert not intervals_overlap(jan10, jan20, date(2024, 1, 21), date(2024, 1, 30))
    assert not intervals_overlap(jan10, jan20, date(2024, 1, 1), date(2024, 1, 9))


def test_single_day_bookings():
    day = date(2024, 3, 1)
    assert intervals_overlap(day, day, day, day)
    assert not intervals_overlap(day, day, date(2024, 3, 2), date(2024, 3, 2))


def test_first_conflict_skips_cancelled_deleted_and_excluded():
    start, end = date(2024, 1, 10), date(2024, 1, 20)
    candidates = [
        _candidate(1, start, end, status=BookingStatus.CANCELLED),
        _candidate(2, start, end, deleted=True),
        _candidate(3, start, end),
    ]
    assert first_conflict(candidates, start, end, exclude_booking_id=3) is None
    assert first_conflict(candidates, start, end).id == 3


def test_find_conflict_returns_blocking_booking(db, media, customer):
    b1 = make_booking(db, media, customer, date(2024, 1, 10), date(2024, 1, 20))

    conflict = find_conflict(db, media.id, date(2024, 1, 15), date(2024, 1, 25))
    assert conflict is not None
    assert conflict.id == b1.id
    assert find_conflict(db, media.id, date(2024, 1, 21), date(2024, 1, 25)) is None


def test_find_conflict_ignores_own_interval(db, media, customer):
    b1 = make_booking(db, media, customer, date(2024, 1, 10), date(2024, 1, 20))
    assert find_conflict(db, media.id, date(2024, 1, 12), date(2024, 1, 22), exclude_booking_id=b1.id) is None


def test_find_conflict_is_per_media_unit(db, customer):
    m1 = make_media(db, "SRA-RPR-001")
    m2 = make_media(db, "SRA-RPR-002")
    make_booking(db, m1, customer, date(2024, 1, 10), date(2024, 1, 20))

    assert find_conflict(db, m2.id, date(2024, 1, 10), date(2024, 1, 20)) is None


def test_cancelled_and_deleted_bookings_do_not_block(db, media, customer):
    cancelled = make_booking(db, media, customer, date(2024, 1, 10), date(2024, 1, 20))
    cancelled.status = BookingStatus.CANCELLED
    deleted = make_booking(db, media, make_customer(db, "Ravi Sahu"), date(2024, 2, 1), date(2024, 2, 10))
    deleted.mark_deleted(utcnow())
    db.commit()

    assert find_conflict(db, media.id, date(2024, 1, 1), date(2024, 2, 28)) is None


def test_find_conflicts_lists_all_blocking_in_date_order(db, media, customer):
    later = make_booking(db, media, customer, date(2024, 3, 1), date(2024, 3, 10))
    earlier = make_booking(db, media, customer, date(2024, 1, 1), date(2024, 1, 10))

    blocking = find_conflicts(db, media.id, date(2024, 1, 1), date(2024, 12, 31))
    assert [b.id for b in blocking] == [earlier.id, later.id]
