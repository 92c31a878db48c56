"""Activity log repository - Database operations for the audit trail"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import ActivityLog


class ActivityLogRepository:
    """Repository for activity log database operations"""

    @staticmethod
    def create_entry(db: Session, **entry_data) -> ActivityLog:
        entry = ActivityLog(**entry_data)
        db.add(entry)
        db.commit()
        return entry

    @staticmethod
    def get_entries(
        db: Session,
        module: Optional[str] = None,
        action: Optional[str] = None,
        user_sub: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> tuple[list[ActivityLog], int]:
        query = db.query(ActivityLog)

        if module:
            query = query.filter(ActivityLog.module == module)
        if action:
            query = query.filter(ActivityLog.action == action)
        if user_sub:
            query = query.filter(ActivityLog.user_sub == user_sub)

        total = query.count()
        items = (
            query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total
