"""Recycle bin service - restore and hard delete of tombstoned records"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import (
    Booking,
    BookingStatus,
    MaintenanceRecord,
    MediaBookedDate,
    Payment,
    TaxInstallment,
    TenderAgreement,
)
from ...shared.dates import utcnow
from ...shared.exceptions import NotFoundError, ValidationError
from ..bookings.availability import find_conflict
from ..bookings.identifiers import load_reference_map
from .tombstones import TOMBSTONES, Tombstone, days_remaining, purge_cutoff

logger = logging.getLogger(__name__)


class RecycleBinService:
    """
    Works across every soft-deletable entity type.

    Restore only clears the tombstone. Derived state (media status, calendar,
    customer totals) is not recomputed; the next edit of the record or
    ``POST /customers/{id}/reconcile`` brings it back in line.
    """

    def __init__(self, db: Session):
        self.db = db

    def _tombstone(self, entity_type: str) -> Tombstone:
        tombstone = TOMBSTONES.get(entity_type)
        if not tombstone:
            raise ValidationError(f"Unknown recycle bin type: {entity_type}")
        return tombstone

    def _get(self, entity_type: str, record_id: int, deleted_only: bool = True):
        model = self._tombstone(entity_type).model
        query = self.db.query(model).filter(model.id == record_id)
        if deleted_only:
            query = query.filter(model.deleted.is_(True))
        return query.first()

    def list_deleted(self, now: Optional[datetime] = None) -> list[dict]:
        """Tombstoned records of every type, newest deletion first"""
        now = now or utcnow()
        references = load_reference_map(self.db)

        items = []
        for tombstone in TOMBSTONES.values():
            query = self.db.query(tombstone.model).filter(tombstone.model.deleted.is_(True))
            if tombstone.model is Booking:
                query = query.options(joinedload(Booking.media), joinedload(Booking.customer))
            for record in query.all():
                display_name, sub_text = tombstone.label(record, references)
                items.append(
                    {
                        "id": record.id,
                        "type": tombstone.type,
                        "displayName": display_name,
                        "subText": sub_text,
                        "deletedAt": record.deleted_at,
                        "daysRemaining": days_remaining(record.deleted_at, now),
                    }
                )

        items.sort(key=lambda item: item["deletedAt"] or datetime.min, reverse=True)
        return items

    def restore(self, record_id: int, entity_type: str) -> dict:
        record = self._get(entity_type, record_id, deleted_only=False)
        if not record:
            raise NotFoundError(entity_type.capitalize(), record_id)

        record.restore()
        restored_taxes = 0
        if entity_type == "agreement":
            restored_taxes = (
                self.db.query(TaxInstallment)
                .filter(TaxInstallment.agreement_id == record_id, TaxInstallment.deleted.is_(True))
                .update({"deleted": False, "deleted_at": None}, synchronize_session=False)
            )
        self.db.commit()

        if entity_type == "agreement":
            logger.info(f"♻️ Agreement {record_id} restored with {restored_taxes} tax record(s)")
            return {"message": "Agreement and associated taxes restored successfully"}
        logger.info(f"♻️ {entity_type} {record_id} restored")
        if entity_type == "booking":
            return self._report_restored_overlap(record)
        return {"message": "Item restored successfully"}

    def _report_restored_overlap(self, booking: Booking) -> dict:
        """Restore does not re-check availability; surface any overlap it brought back"""
        result = {"message": "Item restored successfully"}
        if booking.status == BookingStatus.CANCELLED:
            return result

        conflict = find_conflict(
            self.db, booking.media_id, booking.start_date, booking.end_date, exclude_booking_id=booking.id
        )
        if conflict:
            references = load_reference_map(self.db)
            logger.warning(
                f"⚠️ Restored booking {references.get(booking.id)} overlaps live booking "
                f"{references.get(conflict.id)} on media {booking.media_id}"
            )
            result["conflictingBookingId"] = conflict.id
            result["conflictingBookingRef"] = references.get(conflict.id)
        return result

    def _hard_delete(self, entity_type: str, record) -> None:
        """Delete one tombstoned record and whatever cannot outlive it. Caller commits."""
        if entity_type == "agreement":
            self.db.query(TaxInstallment).filter(TaxInstallment.agreement_id == record.id).delete(
                synchronize_session=False
            )
        elif entity_type == "booking":
            self.db.query(MediaBookedDate).filter(MediaBookedDate.booking_id == record.id).delete(
                synchronize_session=False
            )
            self.db.query(Payment).filter(Payment.booking_id == record.id).delete(synchronize_session=False)
        elif entity_type in ("media", "customer"):
            column = Booking.media_id if entity_type == "media" else Booking.customer_id
            if self.db.query(Booking.id).filter(column == record.id).first():
                raise ValidationError(
                    f"{entity_type.capitalize()} {record.id} still has bookings; delete those first"
                )
            if entity_type == "media":
                self.db.query(MaintenanceRecord).filter(MaintenanceRecord.media_id == record.id).delete(
                    synchronize_session=False
                )
        self.db.delete(record)

    def permanent_delete(self, record_id: int, entity_type: str) -> dict:
        self._tombstone(entity_type)
        record = self._get(entity_type, record_id)
        if not record:
            if self._get(entity_type, record_id, deleted_only=False):
                raise ValidationError("Only items in the recycle bin can be permanently deleted")
            raise NotFoundError(entity_type.capitalize(), record_id)

        self._hard_delete(entity_type, record)
        self.db.commit()
        logger.info(f"🔥 {entity_type} {record_id} permanently deleted")
        return {"message": "Item permanently deleted"}

    def wipe(self) -> dict:
        """Hard delete every tombstoned record. Records still referenced are kept."""
        removed = {}
        skipped = 0
        # Dependents first so parents are free to go
        for entity_type in ("tax", "agreement", "booking", "media", "customer"):
            model = TOMBSTONES[entity_type].model
            count = 0
            for record in self.db.query(model).filter(model.deleted.is_(True)).all():
                try:
                    self._hard_delete(entity_type, record)
                except ValidationError as e:
                    logger.warning(f"⚠️ Wipe skipped {entity_type} {record.id}: {e.message}")
                    skipped += 1
                    continue
                count += 1
            self.db.flush()
            removed[entity_type] = count

        self.db.commit()
        logger.info(f"🔥 Recycle bin wiped: {removed} (skipped {skipped})")
        return {"message": "Recycle bin emptied", "removed": removed, "skipped": skipped}

    def purge_expired(self, now: Optional[datetime] = None) -> dict:
        """
        Scheduled purge of agreements and tax records past retention.

        An expired agreement takes every one of its installments with it,
        whatever their own tombstone state. Running it twice is a no-op.
        """
        cutoff = purge_cutoff(now or utcnow())

        expired_ids = [
            agreement_id
            for (agreement_id,) in self.db.query(TenderAgreement.id).filter(
                TenderAgreement.deleted.is_(True),
                TenderAgreement.deleted_at <= cutoff,
            )
        ]

        taxes = 0
        if expired_ids:
            taxes += (
                self.db.query(TaxInstallment)
                .filter(TaxInstallment.agreement_id.in_(expired_ids))
                .delete(synchronize_session=False)
            )
            self.db.query(TenderAgreement).filter(TenderAgreement.id.in_(expired_ids)).delete(
                synchronize_session=False
            )

        taxes += (
            self.db.query(TaxInstallment)
            .filter(TaxInstallment.deleted.is_(True), TaxInstallment.deleted_at <= cutoff)
            .delete(synchronize_session=False)
        )
        self.db.commit()

        if expired_ids or taxes:
            logger.info(f"🧹 Purged {len(expired_ids)} agreement(s) and {taxes} tax record(s)")
        return {"agreements": len(expired_ids), "taxes": taxes}
