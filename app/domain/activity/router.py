"""Activity log router - read access to the audit trail"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentUser, require_editor
from ...database import get_db
from ...models import ActivityLog
from .schemas import ActivityLogListResponse, ActivityLogResponse
from .service import ActivityLogService

router = APIRouter(prefix="/activity-logs", tags=["Activity Logs"])


def get_activity_log_service(db: Session = Depends(get_db)) -> ActivityLogService:
    return ActivityLogService(db)


def to_activity_log_response(entry: ActivityLog) -> ActivityLogResponse:
    return ActivityLogResponse(
        id=entry.id,
        userId=entry.user_sub,
        username=entry.username,
        role=entry.role,
        action=entry.action,
        module=entry.module,
        description=entry.description,
        details=entry.details or {},
        created_at=entry.created_at,
    )


@router.get("", response_model=ActivityLogListResponse)
async def get_activity_logs(
    module: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    userId: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    _user: CurrentUser = Depends(require_editor),
    service: ActivityLogService = Depends(get_activity_log_service),
):
    """Newest first; viewers have no access"""
    result = service.get_logs(page=page, limit=limit, module=module, action=action, user_sub=userId)
    return ActivityLogListResponse(
        data=[to_activity_log_response(e) for e in result["data"]],
        total=result["total"],
        page=result["page"],
        pages=result["pages"],
    )
