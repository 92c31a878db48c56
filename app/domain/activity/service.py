"""Activity log service - records who changed what"""

import logging
import math
from typing import Any, Optional

from sqlalchemy.orm import Session

from ...auth import CurrentUser
from ...models import ActivityLog
from .repository import ActivityLogRepository

logger = logging.getLogger(__name__)


def log_activity(
    db: Session,
    user: Optional[CurrentUser],
    action: str,
    module: str,
    description: str,
    details: Optional[dict[str, Any]] = None,
) -> Optional[ActivityLog]:
    """
    Write one audit entry after the audited change has committed.

    A failure here is logged and swallowed: the change itself already stands
    and the caller still gets its response. ``user`` is None for scheduled jobs.
    """
    try:
        return ActivityLogRepository.create_entry(
            db,
            user_sub=user.sub if user else None,
            username=(user.name or user.sub) if user else "System",
            role=user.role if user else "System",
            action=action,
            module=module,
            description=description,
            details=details or {},
        )
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Audit log write failed ({action} {module}: {description}): {str(e)}")
        return None


class ActivityLogService:
    """Read side of the audit trail"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ActivityLogRepository()

    def get_logs(self, page: int = 1, limit: int = 50, **filters) -> dict:
        entries, total = self.repo.get_entries(self.db, page=page, limit=limit, **filters)
        return {
            "data": entries,
            "total": total,
            "page": page,
            "pages": math.ceil(total / limit) if limit else 1,
        }
