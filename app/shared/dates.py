"""Date helpers shared by the booking and compliance domains"""

from datetime import date, datetime, timezone
from typing import Optional, Union

from dateutil.relativedelta import relativedelta


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_date(value: Union[date, datetime, str, None]) -> Optional[date]:
    """Normalize a date-like value to a calendar date (midnight semantics)"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()


def add_months(anchor: date, months: int) -> date:
    """Calendar month arithmetic, clamping to the last day of short months"""
    return anchor + relativedelta(months=months)


def financial_year_label(value: Union[date, datetime, None]) -> str:
    """
    Indian financial year (April - March) as two-digit start + end year.

    2024-05-10 -> "2425", 2025-02-01 -> "2425". Unknown dates give "0000".
    """
    day = to_date(value)
    if day is None:
        return "0000"
    start_year = day.year - 1 if day.month < 4 else day.year
    end_year = start_year + 1
    return f"{str(start_year)[-2:]}{str(end_year)[-2:]}"
