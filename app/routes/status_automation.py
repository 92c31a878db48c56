"""
API endpoint for status automation and analytics
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..auth import CurrentUser, get_current_user, require_editor
from ..database import get_db
from ..domain.activity.service import log_activity
from ..models import ActivityAction, ActivityModule, Booking, BookingStatus, MediaStatus, MediaUnit
from ..services.status_automation import update_booking_statuses

router = APIRouter(prefix="/status", tags=["status"])


class StatusSummary(BaseModel):
    upcoming: int
    active: int
    completed: int
    cancelled: int
    mediaAvailable: int
    mediaBooked: int
    mediaComingSoon: int
    mediaMaintenance: int


class AutomationResult(BaseModel):
    upcoming_to_active: int
    to_completed: int
    total_updated: int
    media_resynced: int


BOOKING_KEYS = {
    BookingStatus.UPCOMING: "upcoming",
    BookingStatus.ACTIVE: "active",
    BookingStatus.COMPLETED: "completed",
    BookingStatus.CANCELLED: "cancelled",
}

MEDIA_KEYS = {
    MediaStatus.AVAILABLE: "mediaAvailable",
    MediaStatus.BOOKED: "mediaBooked",
    MediaStatus.COMING_SOON: "mediaComingSoon",
    MediaStatus.MAINTENANCE: "mediaMaintenance",
}


@router.get("/analytics", response_model=StatusSummary)
async def get_status_analytics(
    _user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Count live bookings and media units by status"""

    booking_counts = (
        db.query(Booking.status, func.count(Booking.id).label("count"))
        .filter(Booking.deleted.is_(False))
        .group_by(Booking.status)
        .all()
    )
    media_counts = (
        db.query(MediaUnit.status, func.count(MediaUnit.id).label("count"))
        .filter(MediaUnit.deleted.is_(False))
        .group_by(MediaUnit.status)
        .all()
    )

    # Initialize with zeros
    summary = {key: 0 for key in list(BOOKING_KEYS.values()) + list(MEDIA_KEYS.values())}

    for status, count in booking_counts:
        if status in BOOKING_KEYS:
            summary[BOOKING_KEYS[status]] = count
    for status, count in media_counts:
        if status in MEDIA_KEYS:
            summary[MEDIA_KEYS[status]] = count

    return StatusSummary(**summary)


@router.post("/automation/run", response_model=AutomationResult)
async def run_status_automation(
    user: CurrentUser = Depends(require_editor), db: Session = Depends(get_db)
):
    """
    Manually trigger status automation
    (In production this runs from the arq worker's daily cron)
    """
    result = update_booking_statuses(db)
    log_activity(
        db,
        user,
        ActivityAction.UPDATE,
        ActivityModule.SYSTEM,
        f"Ran status automation: {result['total_updated']} bookings updated",
        details=result,
    )
    return AutomationResult(**result)
