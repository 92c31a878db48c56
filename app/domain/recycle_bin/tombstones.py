"""
Tombstone registry for the recycle bin.

Every soft-deletable entity type is registered once with its model and a
label builder that turns a tombstoned row into the bin's display shape.
Retention is counted in whole days from ``deleted_at``.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from ...config import RECYCLE_BIN_RETENTION_DAYS
from ...models import Booking, Customer, MediaUnit, TaxInstallment, TenderAgreement


@dataclass(frozen=True)
class Tombstone:
    type: str
    model: type
    # (record, booking reference map) -> (display_name, sub_text)
    label: Callable[[object, dict], tuple[str, Optional[str]]]
    # Only these types are removed by the scheduled purge
    auto_purge: bool = False


def _media_label(media: MediaUnit, _refs: dict):
    return media.name or "Unknown Media", f"{media.city or ''}, {media.district or ''} ({media.media_type})"


def _booking_label(booking: Booking, refs: dict):
    client = None
    if booking.customer:
        client = booking.customer.company or booking.customer.name
    site = booking.media.name if booking.media else "Site N/A"
    return refs.get(booking.id, "Unknown ID"), f"{client or 'Unknown Client'} • {site}"


def _customer_label(customer: Customer, _refs: dict):
    return customer.company or customer.name, customer.customer_group or "No Group"


def _agreement_label(agreement: TenderAgreement, _refs: dict):
    return agreement.tender_number or "Tender Agreement", agreement.tender_name


def _tax_label(tax: TaxInstallment, _refs: dict):
    return f"Tax: {tax.tender_number}", f"Amount: {tax.amount}"


TOMBSTONES = {
    t.type: t
    for t in (
        Tombstone("media", MediaUnit, _media_label),
        Tombstone("booking", Booking, _booking_label),
        Tombstone("customer", Customer, _customer_label),
        Tombstone("agreement", TenderAgreement, _agreement_label, auto_purge=True),
        Tombstone("tax", TaxInstallment, _tax_label, auto_purge=True),
    )
}


def days_remaining(deleted_at: Optional[datetime], now: datetime, retention_days: int = RECYCLE_BIN_RETENTION_DAYS) -> int:
    """Whole days left before the purge job may remove the record, never negative"""
    if deleted_at is None:
        return retention_days
    elapsed = math.floor((now - deleted_at).total_seconds() / 86400)
    return max(0, retention_days - elapsed)


def purge_cutoff(now: datetime, retention_days: int = RECYCLE_BIN_RETENTION_DAYS) -> datetime:
    return now - timedelta(days=retention_days)


def is_purge_eligible(
    deleted_at: Optional[datetime], now: datetime, retention_days: int = RECYCLE_BIN_RETENTION_DAYS
) -> bool:
    return deleted_at is not None and deleted_at <= purge_cutoff(now, retention_days)
