"""Compliance service - Business logic for tender agreements and tax installments"""

import logging
from datetime import date, timedelta
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...config import EXPIRING_SOON_DAYS
from ...models import TaxInstallment, TaxStatus, TenderAgreement
from ...shared.dates import utcnow
from ...shared.exceptions import NotFoundError, ValidationError
from .installments import generate_installments, terms_changed
from .repository import ComplianceRepository
from .schemas import AgreementCreate, AgreementUpdate

logger = logging.getLogger(__name__)

AGREEMENT_FIELD_MAP = {
    "tenderName": "tender_name",
    "district": "district",
    "area": "area",
    "mediaIds": "media_ids",
    "startDate": "start_date",
    "endDate": "end_date",
    "taxFrequency": "tax_frequency",
    "licenseFee": "license_fee",
    "documentUrl": "document_url",
}


class ComplianceService:
    """Service layer for tender agreements and their tax schedules"""

    def __init__(self, db: Session, today: Callable[[], date] = date.today):
        self.db = db
        self.today = today
        self.repo = ComplianceRepository()

    def get_agreement(self, agreement_id: int) -> TenderAgreement:
        agreement = self.repo.get_agreement_by_id(self.db, agreement_id)
        if not agreement:
            raise NotFoundError("Agreement", agreement_id)
        return agreement

    def get_overview(self) -> dict:
        """All live agreements (by end date) and installments (by due date)"""
        return {
            "tenders": self.repo.get_agreements(self.db),
            "taxes": self.repo.get_taxes(self.db),
        }

    def create_agreement(self, data: AgreementCreate) -> TenderAgreement:
        if self.repo.get_agreement_by_number(self.db, data.tenderNumber):
            raise ValidationError(f"Tender number {data.tenderNumber} already exists")

        agreement = TenderAgreement(
            tender_name=data.tenderName,
            tender_number=data.tenderNumber,
            district=data.district,
            area=data.area,
            media_ids=data.mediaIds,
            start_date=data.startDate,
            end_date=data.endDate,
            tax_frequency=data.taxFrequency,
            license_fee=data.licenseFee,
            document_url=data.documentUrl,
        )
        self.db.add(agreement)
        self.db.flush()

        installments = generate_installments(agreement)
        self.db.add_all(installments)
        self.db.commit()
        self.db.refresh(agreement)

        logger.info(
            f"✅ Agreement {agreement.tender_number} created with {len(installments)} "
            f"{agreement.tax_frequency} installment(s)"
        )
        return agreement

    def update_agreement(self, agreement_id: int, data: AgreementUpdate) -> TenderAgreement:
        """
        Edit an agreement. A change to start, end, fee or frequency replaces
        the Pending part of the schedule; Paid installments are kept as they are.
        """
        agreement = self.get_agreement(agreement_id)

        updates = {}
        for field, column in AGREEMENT_FIELD_MAP.items():
            value = getattr(data, field)
            if value is not None:
                updates[column] = value

        start = updates.get("start_date", agreement.start_date)
        end = updates.get("end_date", agreement.end_date)
        if start > end:
            raise ValidationError("Start date must be on or before end date")

        regenerate = terms_changed(agreement, updates)
        for column, value in updates.items():
            setattr(agreement, column, value)
        self.db.commit()
        self.db.refresh(agreement)

        if regenerate:
            self.regenerate_installments(agreement)
        return agreement

    def regenerate_installments(self, agreement: TenderAgreement) -> int:
        """
        Delete Pending installments and generate a fresh schedule.

        The delete and the insert commit separately. If the insert fails the
        agreement is left without a pending schedule; that state is logged at
        ERROR and left for an operator, the agreement edit stands.
        """
        removed = self.repo.delete_pending_installments(self.db, agreement.id)
        self.db.commit()

        try:
            installments = generate_installments(agreement)
            self.db.add_all(installments)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(
                f"❌ Agreement {agreement.tender_number}: removed {removed} pending installment(s) "
                f"but regeneration failed - schedule needs manual repair",
                exc_info=True,
            )
            return 0

        logger.info(
            f"🔄 Agreement {agreement.tender_number}: replaced {removed} pending installment(s) "
            f"with {len(installments)}"
        )
        return len(installments)

    def delete_agreement(self, agreement_id: int) -> dict:
        """Soft delete the agreement together with its unpaid installments"""
        agreement = self.get_agreement(agreement_id)
        now = utcnow()
        agreement.mark_deleted(now)
        hidden = self.repo.tombstone_pending_installments(self.db, agreement.id, now)
        self.db.commit()
        logger.info(f"🗑️ Agreement {agreement.tender_number} moved to recycle bin with {hidden} pending tax(es)")
        return {"message": "Moved to recycle bin"}

    def delete_tax(self, tax_id: int) -> dict:
        tax = self.repo.get_tax_by_id(self.db, tax_id)
        if not tax:
            raise NotFoundError("Tax record", tax_id)
        tax.mark_deleted(utcnow())
        self.db.commit()
        logger.info(f"🗑️ Tax record {tax_id} moved to recycle bin")
        return {"message": "Moved to recycle bin"}

    def pay_tax(self, tax_id: int, receipt_url: Optional[str] = None) -> TaxInstallment:
        tax = self.repo.get_tax_by_id(self.db, tax_id)
        if not tax:
            raise NotFoundError("Tax record", tax_id)
        if tax.status == TaxStatus.PAID:
            raise ValidationError("Tax installment is already paid")

        tax.status = TaxStatus.PAID
        tax.payment_date = utcnow()
        if receipt_url:
            tax.receipt_url = receipt_url
        self.db.commit()
        self.db.refresh(tax)
        logger.info(f"💳 Tax record {tax_id} ({tax.tender_number}) paid: {tax.amount}")
        return tax

    def get_stats(self) -> dict:
        today = self.today()
        return {
            "totalActiveTenders": self.repo.count_agreements_ending_between(self.db, today),
            "expiringTenders": self.repo.count_agreements_ending_between(
                self.db, today, today + timedelta(days=EXPIRING_SOON_DAYS)
            ),
            "pendingTaxes": self.repo.count_pending_taxes(self.db),
            "overdueTaxes": self.repo.count_overdue_taxes(self.db, today),
            "totalTaxPaid": round(self.repo.sum_taxes(self.db, paid=True), 2),
            "totalTaxLiability": round(self.repo.sum_taxes(self.db, paid=False), 2),
        }
