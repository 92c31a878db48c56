"""Recycle bin router - FastAPI endpoints for soft-deleted records"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_user, require_editor, require_superadmin
from ...database import get_db
from ...models import ActivityAction, ActivityModule
from ..activity.service import log_activity
from .schemas import EntityTypeLiteral, RecycleBinItem, RestoreRequest
from .service import RecycleBinService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recycle-bin", tags=["Recycle Bin"])


def get_recycle_bin_service(db: Session = Depends(get_db)) -> RecycleBinService:
    """Dependency injection for RecycleBinService"""
    return RecycleBinService(db)


@router.get("", response_model=list[RecycleBinItem])
async def list_deleted(
    _user: CurrentUser = Depends(get_current_user),
    service: RecycleBinService = Depends(get_recycle_bin_service),
):
    return service.list_deleted()


@router.post("/restore")
async def restore_item(
    data: RestoreRequest,
    user: CurrentUser = Depends(require_editor),
    service: RecycleBinService = Depends(get_recycle_bin_service),
):
    logger.info(f"♻️ {user.sub} restoring {data.type} {data.id}")
    result = service.restore(data.id, data.type)
    log_activity(
        service.db,
        user,
        ActivityAction.RESTORE,
        ActivityModule.SYSTEM,
        f"Restored {data.type} {data.id} from recycle bin",
        {"id": data.id, "type": data.type},
    )
    return result


@router.delete("/{record_id}")
async def permanent_delete(
    record_id: int,
    type: EntityTypeLiteral = Query(...),
    user: CurrentUser = Depends(require_editor),
    service: RecycleBinService = Depends(get_recycle_bin_service),
):
    logger.info(f"🔥 {user.sub} permanently deleting {type} {record_id}")
    result = service.permanent_delete(record_id, type)
    log_activity(
        service.db,
        user,
        ActivityAction.DELETE,
        ActivityModule.SYSTEM,
        f"Permanently deleted {type} {record_id}",
        {"id": record_id, "type": type},
    )
    return result


@router.delete("")
async def wipe_recycle_bin(
    user: CurrentUser = Depends(require_superadmin),
    service: RecycleBinService = Depends(get_recycle_bin_service),
):
    logger.warning(f"🔥 {user.sub} is emptying the recycle bin")
    result = service.wipe()
    log_activity(
        service.db,
        user,
        ActivityAction.DELETE,
        ActivityModule.SYSTEM,
        "Emptied the recycle bin",
        {"removed": result["removed"], "skipped": result["skipped"]},
    )
    return result
