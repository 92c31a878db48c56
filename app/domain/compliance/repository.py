"""Compliance repository - Database operations for agreements and tax installments"""

from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ...models import TaxInstallment, TaxStatus, TenderAgreement


class ComplianceRepository:
    """Repository for tender agreement and tax installment operations"""

    @staticmethod
    def get_agreement_by_id(
        db: Session, agreement_id: int, include_deleted: bool = False
    ) -> Optional[TenderAgreement]:
        query = db.query(TenderAgreement).filter(TenderAgreement.id == agreement_id)
        if not include_deleted:
            query = query.filter(TenderAgreement.deleted.is_(False))
        return query.first()

    @staticmethod
    def get_agreement_by_number(db: Session, tender_number: str) -> Optional[TenderAgreement]:
        return db.query(TenderAgreement).filter(TenderAgreement.tender_number == tender_number).first()

    @staticmethod
    def get_agreements(db: Session) -> list[TenderAgreement]:
        return (
            db.query(TenderAgreement)
            .options(selectinload(TenderAgreement.installments))
            .filter(TenderAgreement.deleted.is_(False))
            .order_by(TenderAgreement.end_date.asc())
            .all()
        )

    @staticmethod
    def get_taxes(db: Session) -> list[TaxInstallment]:
        return (
            db.query(TaxInstallment)
            .filter(TaxInstallment.deleted.is_(False))
            .order_by(TaxInstallment.due_date.asc(), TaxInstallment.id.asc())
            .all()
        )

    @staticmethod
    def get_tax_by_id(db: Session, tax_id: int) -> Optional[TaxInstallment]:
        return (
            db.query(TaxInstallment)
            .filter(TaxInstallment.id == tax_id, TaxInstallment.deleted.is_(False))
            .first()
        )

    @staticmethod
    def delete_pending_installments(db: Session, agreement_id: int) -> int:
        """Remove the unpaid part of a schedule; Paid rows are kept"""
        return (
            db.query(TaxInstallment)
            .filter(
                TaxInstallment.agreement_id == agreement_id,
                TaxInstallment.status == TaxStatus.PENDING,
            )
            .delete(synchronize_session=False)
        )

    @staticmethod
    def tombstone_pending_installments(db: Session, agreement_id: int, when) -> int:
        return (
            db.query(TaxInstallment)
            .filter(
                TaxInstallment.agreement_id == agreement_id,
                TaxInstallment.status == TaxStatus.PENDING,
                TaxInstallment.deleted.is_(False),
            )
            .update({"deleted": True, "deleted_at": when}, synchronize_session=False)
        )

    @staticmethod
    def count_agreements_ending_between(db: Session, start: date, end: Optional[date] = None) -> int:
        query = db.query(func.count(TenderAgreement.id)).filter(
            TenderAgreement.deleted.is_(False),
            TenderAgreement.end_date >= start,
        )
        if end is not None:
            query = query.filter(TenderAgreement.end_date <= end)
        return query.scalar() or 0

    @staticmethod
    def count_pending_taxes(db: Session) -> int:
        return (
            db.query(func.count(TaxInstallment.id))
            .filter(TaxInstallment.deleted.is_(False), TaxInstallment.status == TaxStatus.PENDING)
            .scalar()
            or 0
        )

    @staticmethod
    def count_overdue_taxes(db: Session, today: date) -> int:
        return (
            db.query(func.count(TaxInstallment.id))
            .filter(
                TaxInstallment.deleted.is_(False),
                TaxInstallment.status != TaxStatus.PAID,
                TaxInstallment.due_date < today,
            )
            .scalar()
            or 0
        )

    @staticmethod
    def sum_taxes(db: Session, paid: bool) -> float:
        status_filter = TaxInstallment.status == TaxStatus.PAID if paid else TaxInstallment.status != TaxStatus.PAID
        total = (
            db.query(func.coalesce(func.sum(TaxInstallment.amount), 0))
            .filter(TaxInstallment.deleted.is_(False), status_filter)
            .scalar()
        )
        return float(total or 0)
