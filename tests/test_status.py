from datetime import date, datetime

import pytest

from app.domain.bookings.status import derive_payment_status, derive_status
from app.models import BookingStatus, PaymentStatus

START = date(2024, 1, 10)
END = date(2024, 1, 20)


@pytest.mark.parametrize(
    "today, expected",
    [
        (date(2024, 1, 9), BookingStatus.UPCOMING),
        (date(2024, 1, 10), BookingStatus.ACTIVE),
        (date(2024, 1, 15), BookingStatus.ACTIVE),
        (date(2024, 1, 20), BookingStatus.ACTIVE),
        (date(2024, 1, 21), BookingStatus.COMPLETED),
    ],
)
def test_derive_status_from_dates(today, expected):
    assert derive_status(START, END, today=today) == expected


def test_cancelled_is_sticky():
    for today in (date(2024, 1, 1), date(2024, 1, 15), date(2024, 2, 1)):
        assert derive_status(START, END, BookingStatus.CANCELLED, today) == BookingStatus.CANCELLED


def test_derive_status_compares_at_midnight():
    # Time of day on either side never changes the result
    assert derive_status(datetime(2024, 1, 10, 18, 30), datetime(2024, 1, 20, 23, 59), today=date(2024, 1, 10)) == (
        BookingStatus.ACTIVE
    )
    assert derive_status(START, END, today=datetime(2024, 1, 20, 23, 59)) == BookingStatus.ACTIVE


def test_derive_status_is_idempotent():
    first = derive_status(START, END, BookingStatus.UPCOMING, date(2024, 1, 12))
    assert derive_status(START, END, first, date(2024, 1, 12)) == first


def test_completed_booking_can_derive_back_when_dates_move():
    assert derive_status(START, date(2024, 2, 20), BookingStatus.COMPLETED, date(2024, 2, 1)) == BookingStatus.ACTIVE


@pytest.mark.parametrize(
    "amount, paid, status, expected",
    [
        (10000, 10000, BookingStatus.ACTIVE, PaymentStatus.PAID),
        (10000, 12000, BookingStatus.ACTIVE, PaymentStatus.PAID),
        (10000, 2500, BookingStatus.UPCOMING, PaymentStatus.PARTIALLY_PAID),
        (10000, 0, BookingStatus.UPCOMING, PaymentStatus.PENDING),
        (10000, 10000, BookingStatus.CANCELLED, PaymentStatus.CANCELLED),
        (10000, 0, BookingStatus.CANCELLED, PaymentStatus.CANCELLED),
    ],
)
def test_derive_payment_status(amount, paid, status, expected):
    assert derive_payment_status(amount, paid, status) == expected


def test_zero_amount_booking_counts_as_paid():
    assert derive_payment_status(0, 0) == PaymentStatus.PAID
