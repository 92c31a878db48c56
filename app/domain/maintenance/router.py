"""Maintenance router - FastAPI endpoints for maintenance tasks"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_user, require_editor
from ...database import get_db
from ...models import ActivityAction, ActivityModule, MaintenanceRecord
from ..activity.service import log_activity
from .schemas import MaintenanceCreate, MaintenanceListResponse, MaintenanceResponse, MaintenanceUpdate
from .service import MaintenanceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/maintenance", tags=["Maintenance"])


def get_maintenance_service(db: Session = Depends(get_db)) -> MaintenanceService:
    """Dependency injection for MaintenanceService"""
    return MaintenanceService(db)


def to_maintenance_response(record: MaintenanceRecord) -> MaintenanceResponse:
    return MaintenanceResponse(
        id=record.id,
        mediaId=record.media_id,
        mediaCode=record.media.code if record.media else None,
        mediaStatus=record.media.status if record.media else None,
        title=record.title,
        description=record.description,
        status=record.status,
        priority=record.priority,
        scheduledDate=record.scheduled_date,
        completedDate=record.completed_date,
        cost=record.cost,
        assignedTo=record.assigned_to,
        notes=record.notes,
        created_at=record.created_at,
    )


@router.get("", response_model=MaintenanceListResponse)
async def get_maintenance_records(
    mediaId: Optional[int] = Query(None),
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    _user: CurrentUser = Depends(get_current_user),
    service: MaintenanceService = Depends(get_maintenance_service),
):
    result = service.get_records(page=page, limit=limit, media_id=mediaId, status=status, priority=priority)
    return MaintenanceListResponse(
        data=[to_maintenance_response(r) for r in result["data"]],
        total=result["total"],
        page=result["page"],
        pages=result["pages"],
    )


@router.get("/{record_id}", response_model=MaintenanceResponse)
async def get_maintenance_record(
    record_id: int,
    _user: CurrentUser = Depends(get_current_user),
    service: MaintenanceService = Depends(get_maintenance_service),
):
    return to_maintenance_response(service.get_record(record_id))


@router.post("", response_model=MaintenanceResponse, status_code=201)
async def create_maintenance_record(
    data: MaintenanceCreate,
    user: CurrentUser = Depends(require_editor),
    service: MaintenanceService = Depends(get_maintenance_service),
):
    record = service.create_record(data)
    log_activity(
        service.db,
        user,
        ActivityAction.CREATE,
        ActivityModule.MEDIA,
        f"Reported maintenance: {record.title}",
        {"taskId": record.id, "mediaId": record.media_id},
    )
    return to_maintenance_response(record)


@router.patch("/{record_id}", response_model=MaintenanceResponse)
async def update_maintenance_record(
    record_id: int,
    data: MaintenanceUpdate,
    user: CurrentUser = Depends(require_editor),
    service: MaintenanceService = Depends(get_maintenance_service),
):
    record = service.update_record(record_id, data)
    log_activity(
        service.db,
        user,
        ActivityAction.UPDATE,
        ActivityModule.MEDIA,
        f"Updated maintenance task: {record.title}",
        {"taskId": record.id},
    )
    return to_maintenance_response(record)


@router.post("/{record_id}/complete", response_model=MaintenanceResponse)
async def complete_maintenance_record(
    record_id: int,
    user: CurrentUser = Depends(require_editor),
    service: MaintenanceService = Depends(get_maintenance_service),
):
    record = service.complete_record(record_id)
    log_activity(
        service.db,
        user,
        ActivityAction.UPDATE,
        ActivityModule.MEDIA,
        f"Completed maintenance task: {record.title}",
        {"taskId": record.id},
    )
    return to_maintenance_response(record)
