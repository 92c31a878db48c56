"""Maintenance repository - Database operations for maintenance records"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import MaintenanceRecord, MaintenanceStatus


class MaintenanceRepository:
    """Repository for maintenance record database operations"""

    @staticmethod
    def get_record_by_id(db: Session, record_id: int) -> Optional[MaintenanceRecord]:
        return (
            db.query(MaintenanceRecord)
            .options(joinedload(MaintenanceRecord.media))
            .filter(MaintenanceRecord.id == record_id)
            .first()
        )

    @staticmethod
    def get_records(
        db: Session,
        media_id: Optional[int] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> tuple[list[MaintenanceRecord], int]:
        query = db.query(MaintenanceRecord)

        if media_id is not None:
            query = query.filter(MaintenanceRecord.media_id == media_id)
        if status:
            query = query.filter(MaintenanceRecord.status == status)
        if priority:
            query = query.filter(MaintenanceRecord.priority == priority)

        total = query.count()
        items = (
            query.options(joinedload(MaintenanceRecord.media))
            .order_by(MaintenanceRecord.created_at.desc(), MaintenanceRecord.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    @staticmethod
    def create_record(db: Session, **record_data) -> MaintenanceRecord:
        record = MaintenanceRecord(**record_data)
        db.add(record)
        return record

    @staticmethod
    def has_open_records(db: Session, media_id: int, exclude_record_id: Optional[int] = None) -> bool:
        query = db.query(MaintenanceRecord.id).filter(
            MaintenanceRecord.media_id == media_id,
            MaintenanceRecord.status.in_(MaintenanceStatus.OPEN),
        )
        if exclude_record_id is not None:
            query = query.filter(MaintenanceRecord.id != exclude_record_id)
        return query.first() is not None
