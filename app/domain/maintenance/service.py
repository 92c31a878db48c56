"""Maintenance service - Business logic for maintenance tasks"""

import logging
import math

from sqlalchemy.orm import Session

from ...models import MaintenanceRecord, MaintenanceStatus, MediaStatus
from ...shared.dates import utcnow
from ...shared.exceptions import NotFoundError, ValidationError
from ..media.repository import MediaRepository
from ..media.service import MediaSyncService
from .repository import MaintenanceRepository
from .schemas import MaintenanceCreate, MaintenanceUpdate

logger = logging.getLogger(__name__)

MAINTENANCE_FIELD_MAP = {
    "title": "title",
    "description": "description",
    "priority": "priority",
    "scheduledDate": "scheduled_date",
    "cost": "cost",
    "assignedTo": "assigned_to",
    "notes": "notes",
}


class MaintenanceService:
    """
    Opening a task marks its media unit Maintenance; completing the last open
    task releases it. Both go through the synchronizer afterwards, so a unit
    with an Active booking always ends up Booked.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = MaintenanceRepository()
        self.media_repo = MediaRepository()
        self.sync = MediaSyncService(db)

    def get_record(self, record_id: int) -> MaintenanceRecord:
        record = self.repo.get_record_by_id(self.db, record_id)
        if not record:
            raise NotFoundError("Maintenance record", record_id)
        return record

    def get_records(self, page: int = 1, limit: int = 50, **filters) -> dict:
        records, total = self.repo.get_records(self.db, page=page, limit=limit, **filters)
        return {
            "data": records,
            "total": total,
            "page": page,
            "pages": math.ceil(total / limit) if limit else 1,
        }

    def create_record(self, data: MaintenanceCreate) -> MaintenanceRecord:
        media = self.media_repo.get_media_by_id(self.db, data.mediaId)
        if not media:
            raise NotFoundError("Media", data.mediaId)

        record = self.repo.create_record(
            self.db,
            media_id=media.id,
            status=MaintenanceStatus.PENDING,
            **{column: getattr(data, field) for field, column in MAINTENANCE_FIELD_MAP.items()},
        )
        media.status = MediaStatus.MAINTENANCE
        self.db.commit()
        logger.info(f"🔧 Maintenance task {record.id} reported on {media.code}: {record.title}")

        self.sync.sync_media_status(media.id)
        self.db.refresh(record)
        return record

    def update_record(self, record_id: int, data: MaintenanceUpdate) -> MaintenanceRecord:
        record = self.get_record(record_id)

        for field, column in MAINTENANCE_FIELD_MAP.items():
            value = getattr(data, field)
            if value is not None:
                setattr(record, column, value)

        if data.status == MaintenanceStatus.COMPLETED:
            return self.complete_record(record_id)
        if data.status is not None:
            if record.status == MaintenanceStatus.COMPLETED:
                raise ValidationError("Completed maintenance tasks cannot be reopened")
            record.status = data.status

        self.db.commit()
        self.db.refresh(record)
        return record

    def complete_record(self, record_id: int) -> MaintenanceRecord:
        record = self.get_record(record_id)
        if record.status == MaintenanceStatus.COMPLETED:
            raise ValidationError("Maintenance task is already completed")

        record.status = MaintenanceStatus.COMPLETED
        record.completed_date = utcnow()

        media = self.media_repo.get_media_by_id(self.db, record.media_id, include_deleted=True)
        still_open = self.repo.has_open_records(self.db, record.media_id, exclude_record_id=record.id)
        if media and media.status == MediaStatus.MAINTENANCE and not still_open:
            media.status = MediaStatus.AVAILABLE
        self.db.commit()
        logger.info(f"✅ Maintenance task {record.id} completed")

        if media:
            self.sync.sync_media_status(media.id)
        self.db.refresh(record)
        return record
