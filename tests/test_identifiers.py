from datetime import date, datetime

import pytest
from conftest import make_booking

from app.domain.bookings.identifiers import (
    booking_reference,
    build_reference_map,
    format_booking_reference,
    parse_booking_reference,
)
from app.shared.dates import financial_year_label, utcnow


@pytest.mark.parametrize(
    "day, label",
    [
        (date(2024, 4, 1), "2425"),
        (date(2024, 5, 10), "2425"),
        (date(2025, 3, 31), "2425"),
        (date(2025, 2, 1), "2425"),
        (date(2024, 1, 10), "2324"),
        (date(2099, 12, 31), "9900"),
        (None, "0000"),
    ],
)
def test_financial_year_label(day, label):
    assert financial_year_label(day) == label


def test_format_booking_reference():
    assert format_booking_reference(date(2024, 5, 10), None, 0) == "SRA/2425/1001"
    assert format_booking_reference(None, datetime(2024, 2, 1, 9, 0), 41) == "SRA/2324/1042"


def test_reference_map_sorts_globally_by_start_date():
    rows = [
        (10, date(2024, 6, 1), datetime(2024, 1, 1)),
        (11, date(2024, 1, 5), datetime(2024, 5, 1)),
        (12, None, datetime(2024, 3, 1)),  # falls back to creation date
    ]
    refs = build_reference_map(rows)
    assert refs == {
        11: "SRA/2324/1001",
        12: "SRA/2324/1002",
        10: "SRA/2425/1003",
    }


def test_reference_map_breaks_ties_by_id():
    same_day = date(2024, 7, 1)
    refs = build_reference_map([(7, same_day, None), (3, same_day, None)])
    assert refs[3] == "SRA/2425/1001"
    assert refs[7] == "SRA/2425/1002"


def test_parse_booking_reference():
    assert parse_booking_reference("SRA/2425/1042") == ("2425", 1042)
    with pytest.raises(ValueError):
        parse_booking_reference("INV/2425/1042")


def test_deleted_bookings_keep_their_place_in_the_sequence(db, media, customer):
    first = make_booking(db, media, customer, date(2024, 1, 10), date(2024, 1, 20))
    second = make_booking(db, media, customer, date(2024, 2, 10), date(2024, 2, 20))
    assert booking_reference(db, second.id) == "SRA/2324/1002"

    first.mark_deleted(utcnow())
    db.commit()

    assert booking_reference(db, first.id) == "SRA/2324/1001"
    assert booking_reference(db, second.id) == "SRA/2324/1002"
