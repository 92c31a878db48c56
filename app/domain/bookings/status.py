"""
Booking lifecycle and payment status derivation.

Lifecycle: Upcoming -> Active -> Completed, driven by the calendar.
Cancelled is only ever set by an operator and is sticky: derivation never
produces it and never leaves it.
"""

from datetime import date, datetime
from typing import Optional, Union

from ...models import BookingStatus, PaymentStatus
from ...shared.dates import to_date


def derive_status(
    start: Union[date, datetime],
    end: Union[date, datetime],
    current_status: Optional[str] = None,
    today: Optional[date] = None,
) -> str:
    """
    Status implied by the booking dates, compared at midnight.

    Args:
        start: First booked day
        end: Last booked day (inclusive)
        current_status: Stored status; Cancelled short-circuits derivation
        today: Reference day, defaults to the current date

    Returns:
        One of Upcoming, Active, Completed (or Cancelled when already cancelled)
    """
    if current_status == BookingStatus.CANCELLED:
        return BookingStatus.CANCELLED

    today = to_date(today) or date.today()
    start_day = to_date(start)
    end_day = to_date(end)

    if today < start_day:
        return BookingStatus.UPCOMING
    if today > end_day:
        return BookingStatus.COMPLETED
    return BookingStatus.ACTIVE


def derive_payment_status(amount: float, amount_paid: float, status: Optional[str] = None) -> str:
    """Cancelled bookings are always Cancelled, otherwise compare receipts with the contract"""
    if status == BookingStatus.CANCELLED:
        return PaymentStatus.CANCELLED

    amount_paid = amount_paid or 0
    if amount_paid >= (amount or 0):
        return PaymentStatus.PAID
    if amount_paid > 0:
        return PaymentStatus.PARTIALLY_PAID
    return PaymentStatus.PENDING
