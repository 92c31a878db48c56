from datetime import date

import pytest
from conftest import make_booking, make_customer, make_media

from app.domain.bookings.schemas import BookingUpdate
from app.domain.bookings.service import BookingService
from app.domain.customers.ledger import CustomerLedger
from app.models import Customer, MediaUnit
from app.shared.exceptions import NotFoundError

TODAY = date(2024, 1, 15)


def _totals(db, customer_id):
    db.expire_all()
    customer = db.get(Customer, customer_id)
    return customer.total_bookings, customer.total_spent


def test_create_counts_initial_payment_not_contract_total(db, media, customer):
    make_booking(db, media, customer, date(2024, 1, 10), date(2024, 1, 20), amount=10000, amount_paid=4000)

    assert _totals(db, customer.id) == (1, 4000)


def test_amount_paid_change_applies_delta(db, media, customer):
    booking = make_booking(db, media, customer, date(2024, 1, 10), date(2024, 1, 20), amount=10000, amount_paid=4000)
    service = BookingService(db, today=lambda: TODAY)

    service.update_booking(booking.id, BookingUpdate(amountPaid=10000))
    assert _totals(db, customer.id) == (1, 10000)

    service.update_booking(booking.id, BookingUpdate(amountPaid=7500))
    assert _totals(db, customer.id) == (1, 7500)


def test_soft_delete_reverses_counters(db, media, customer):
    make_booking(db, media, customer, date(2024, 2, 1), date(2024, 2, 10), amount_paid=3000)
    drop = make_booking(db, media, customer, date(2024, 1, 10), date(2024, 1, 20), amount_paid=10000)
    assert _totals(db, customer.id) == (2, 13000)

    BookingService(db, today=lambda: TODAY).delete_booking(drop.id)

    assert _totals(db, customer.id) == (1, 3000)


def test_reassigning_booking_moves_counters(db, media, customer):
    other = make_customer(db, "Ravi Sahu")
    booking = make_booking(db, media, customer, date(2024, 1, 10), date(2024, 1, 20), amount_paid=5000)

    BookingService(db, today=lambda: TODAY).update_booking(booking.id, BookingUpdate(customerId=other.id))

    assert _totals(db, customer.id) == (0, 0)
    assert _totals(db, other.id) == (1, 5000)


def test_increments_do_not_lose_updates_across_sessions(file_sessions):
    """Two sessions holding stale copies of the customer both add to it"""
    setup = file_sessions()
    customer = make_customer(setup)
    customer_id = customer.id
    setup.close()

    first, second = file_sessions(), file_sessions()
    try:
        # Both sessions read total_spent = 0 before either writes
        assert first.get(Customer, customer_id).total_spent == 0
        assert second.get(Customer, customer_id).total_spent == 0

        CustomerLedger(first).record_booking_created(customer_id, 10000)
        CustomerLedger(second).record_booking_created(customer_id, 2500)
        CustomerLedger(first).apply_payment_delta(customer_id, 500)
    finally:
        first.close()
        second.close()

    check = file_sessions()
    try:
        assert _totals(check, customer_id) == (2, 13000)
    finally:
        check.close()


def test_concurrent_bookings_for_same_customer_sum_up(file_sessions):
    setup = file_sessions()
    customer = make_customer(setup)
    units = [make_media(setup, f"SRA-RPR-00{i}") for i in range(1, 4)]
    customer_id = customer.id
    unit_ids = [u.id for u in units]
    setup.close()

    sessions = [file_sessions() for _ in unit_ids]
    try:
        # Load the customer everywhere first so each session holds a stale copy
        for session in sessions:
            session.get(Customer, customer_id)
        for session, unit_id, paid in zip(sessions, unit_ids, (1000, 2000, 3000)):
            make_booking(
                session,
                session.get(MediaUnit, unit_id),
                session.get(Customer, customer_id),
                date(2024, 1, 10),
                date(2024, 1, 20),
                amount=5000,
                amount_paid=paid,
            )
    finally:
        for session in sessions:
            session.close()

    check = file_sessions()
    try:
        assert _totals(check, customer_id) == (3, 6000)
    finally:
        check.close()


def test_zero_delta_is_a_no_op(db, customer):
    CustomerLedger(db).apply_payment_delta(customer.id, 0)
    assert _totals(db, customer.id) == (0, 0)


def test_unknown_customer_raises(db):
    with pytest.raises(NotFoundError):
        CustomerLedger(db).record_booking_created(424242, 100)


def test_recompute_heals_drift(db, media, customer):
    make_booking(db, media, customer, date(2024, 1, 10), date(2024, 1, 20), amount_paid=4000)
    customer.total_spent = 999999
    customer.total_bookings = 7
    db.commit()

    healed = CustomerLedger(db).recompute(customer.id)

    assert (healed.total_bookings, healed.total_spent) == (1, 4000)
