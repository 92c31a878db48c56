"""
Tax installment schedule for tender agreements.

An agreement's annual license fee is split into equal installments, one per
billing period, starting on the agreement's start date:

    Monthly 1, Quarterly 3, Half-Yearly 6, Yearly and One-Time 12 months per installment

Each installment is ``round(license_fee / (12 / step), 2)``. Due dates are
``start + step * n`` months and are emitted while strictly before the end
date; the end date itself never gets an installment. One-Time agreements
step 12 months exactly like Yearly ones.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from ...config import EXPIRING_SOON_DAYS
from ...models import AgreementStatus, TaxFrequency, TaxInstallment, TaxStatus, TenderAgreement
from ...shared.dates import add_months, to_date

logger = logging.getLogger(__name__)

STEP_MONTHS = {
    TaxFrequency.MONTHLY: 1,
    TaxFrequency.QUARTERLY: 3,
    TaxFrequency.HALF_YEARLY: 6,
    TaxFrequency.YEARLY: 12,
    TaxFrequency.ONE_TIME: 12,
}

# Fields whose change invalidates the pending schedule
TERMS_FIELDS = ("start_date", "end_date", "license_fee", "tax_frequency")


def installment_amount(license_fee: float, frequency: str) -> float:
    step = STEP_MONTHS[frequency]
    return round(license_fee / (12 / step), 2)


def due_dates(start: date, end: date, frequency: str) -> list[date]:
    step = STEP_MONTHS[frequency]
    dates = []
    n = 0
    cursor = start
    while cursor < end:
        dates.append(cursor)
        n += 1
        # Always offset from the anchor so Jan 31 -> Feb 29 -> Mar 31
        cursor = add_months(start, step * n)
    return dates


def generate_installments(agreement: TenderAgreement) -> list[TaxInstallment]:
    """Unsaved Pending installments covering the whole agreement term"""
    frequency = agreement.tax_frequency
    if frequency not in STEP_MONTHS:
        raise ValueError(f"Unknown tax frequency: {frequency}")

    start = to_date(agreement.start_date)
    end = to_date(agreement.end_date)
    amount = installment_amount(agreement.license_fee, frequency)

    return [
        TaxInstallment(
            agreement_id=agreement.id,
            tender_number=agreement.tender_number,
            district=agreement.district,
            area=agreement.area,
            due_date=due,
            amount=amount,
            status=TaxStatus.PENDING,
        )
        for due in due_dates(start, end, frequency)
    ]


def terms_changed(agreement: TenderAgreement, updates: dict) -> bool:
    """True when ``updates`` moves any field the schedule is computed from"""
    for field in TERMS_FIELDS:
        if field in updates and updates[field] is not None and updates[field] != getattr(agreement, field):
            return True
    return False


def installment_display_status(installment: TaxInstallment, today: Optional[date] = None) -> str:
    """Overdue is never stored: an unpaid installment past its due date reads as Overdue"""
    today = today or date.today()
    if installment.status != TaxStatus.PAID and installment.due_date < today:
        return TaxStatus.OVERDUE
    return installment.status


def agreement_status(end_date: date, today: Optional[date] = None) -> str:
    today = today or date.today()
    if end_date < today:
        return AgreementStatus.EXPIRED
    if end_date <= today + timedelta(days=EXPIRING_SOON_DAYS):
        return AgreementStatus.EXPIRING_SOON
    return AgreementStatus.ACTIVE
