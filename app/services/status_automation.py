"""
Automated status transitions for bookings
Handles Upcoming → Active and Active → Completed as the calendar moves on,
then re-checks every media unit so "Booked" tracks the active bookings.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ..domain.bookings.service import BookingService
from ..domain.media.service import MediaSyncService
from ..models import MediaUnit

logger = logging.getLogger(__name__)


def update_booking_statuses(db: Session, today: Optional[date] = None) -> dict:
    """
    Update booking statuses based on dates
    Should be run as a scheduled job (daily cron)

    Booking statuses: Upcoming → Active → Completed (Cancelled is never touched)

    Returns:
        dict: Summary of status changes made
    """
    today = today or date.today()
    summary = BookingService(db, today=lambda: today).refresh_statuses()
    summary["media_resynced"] = resync_all_media(db)

    if not summary["total_updated"]:
        logger.debug("ℹ️ No booking status updates needed")
    return summary


def resync_all_media(db: Session) -> int:
    """
    Re-run the media status sync for every live media unit.

    Heals units whose sync step failed or whose bookings were restored from
    the recycle bin. Returns the number of units whose status changed.
    """
    sync = MediaSyncService(db)
    changed = 0
    media_rows = db.query(MediaUnit.id, MediaUnit.status).filter(MediaUnit.deleted.is_(False)).all()
    for media_id, previous in media_rows:
        try:
            if sync.sync_media_status(media_id) != previous:
                changed += 1
        except Exception as e:
            db.rollback()
            logger.error(f"❌ Media {media_id} resync failed: {str(e)}")

    if changed:
        logger.info(f"🔄 Media resync changed {changed} unit(s)")
    return changed
