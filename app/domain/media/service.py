"""Media service - Business logic for media units and booking synchronization"""

import logging
import math
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Booking, BookingStatus, MediaStatus, MediaUnit
from ...shared.dates import utcnow
from ...shared.exceptions import NotFoundError, ValidationError
from ..bookings.availability import find_conflicts
from ..bookings.identifiers import load_reference_map
from .repository import MediaRepository
from .schemas import MediaCreate, MediaUpdate

logger = logging.getLogger(__name__)

MEDIA_FIELD_MAP = {
    "name": "name",
    "mediaType": "media_type",
    "state": "state",
    "district": "district",
    "city": "city",
    "address": "address",
    "size": "size",
    "lighting": "lighting",
    "facing": "facing",
    "pricePerMonth": "price_per_month",
    "imageUrl": "image_url",
    "status": "status",
}


class MediaService:
    """Service layer for media unit business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = MediaRepository()

    def get_media(self, media_id: int) -> MediaUnit:
        media = self.repo.get_media_by_id(self.db, media_id)
        if not media:
            raise NotFoundError("Media", media_id)
        return media

    def list_media(self, page: int = 1, limit: int = 50, **filters) -> dict:
        items, total = self.repo.search_media(self.db, page=page, limit=limit, **filters)
        return {
            "data": items,
            "total": total,
            "page": page,
            "pages": math.ceil(total / limit) if limit else 1,
        }

    def create_media(self, data: MediaCreate) -> MediaUnit:
        if self.repo.get_media_by_code(self.db, data.code):
            raise ValidationError(f"Media code {data.code} is already in use")

        media_data = {column: getattr(data, field) for field, column in MEDIA_FIELD_MAP.items()}
        media_data["code"] = data.code
        media = self.repo.create_media(self.db, **media_data)
        logger.info(f"✅ Media {media.code} created (id={media.id})")
        return media

    def update_media(self, media_id: int, data: MediaUpdate) -> MediaUnit:
        media = self.get_media(media_id)

        updates = {}
        for field, column in MEDIA_FIELD_MAP.items():
            value = getattr(data, field)
            if value is not None:
                updates[column] = value

        media = self.repo.update_media(self.db, media, **updates)
        if data.status is not None:
            # An Active booking keeps the unit Booked whatever the operator picked
            synced = MediaSyncService(self.db).sync_media_status(media_id)
            if synced != data.status:
                logger.warning(f"⚠️ Media {media.code}: requested {data.status}, stays {synced} while a booking is Active")
            self.db.refresh(media)
        return media

    def delete_media(self, media_id: int) -> dict:
        """Soft delete; bookings on the unit are left untouched"""
        media = self.get_media(media_id)
        media.mark_deleted(utcnow())
        self.db.commit()
        logger.info(f"🗑️ Media {media.code} moved to recycle bin")
        return {"message": "Media deleted"}

    def check_availability(self, media_id: int, start: date, end: date) -> dict:
        self.get_media(media_id)
        if start > end:
            raise ValidationError("Start date must be on or before end date")

        blocking = find_conflicts(self.db, media_id, start, end)
        references = load_reference_map(self.db) if blocking else {}
        return {
            "mediaId": media_id,
            "start": start,
            "end": end,
            "available": not blocking,
            "blockingBookings": [references.get(b.id, f"#{b.id}") for b in blocking],
        }


class MediaSyncService:
    """
    Keeps a media unit's derived status and booking calendar in line with its bookings.

    Runs after the booking write has committed, in its own read-then-write.
    Nothing here is version guarded: every booking mutation re-runs it, so a
    missed or failed sync heals on the next event.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = MediaRepository()

    def sync_media_status(self, media_id: int) -> Optional[str]:
        """
        Flip Booked <-> Available from the presence of an Active booking.

        Maintenance and Coming Soon are only ever replaced by Booked, never by
        Available.
        """
        media = self.repo.get_media_by_id(self.db, media_id, include_deleted=True)
        if not media:
            logger.warning(f"⚠️ Media {media_id} not found during status sync")
            return None

        has_active = self.repo.has_active_booking(self.db, media_id)
        previous = media.status

        if has_active and media.status != MediaStatus.BOOKED:
            media.status = MediaStatus.BOOKED
        elif not has_active and media.status == MediaStatus.BOOKED:
            media.status = MediaStatus.AVAILABLE

        if media.status != previous:
            self.db.commit()
            logger.info(f"🔄 Media {media.code} status: {previous} → {media.status}")
        return media.status

    def sync_calendar(self, booking: Booking) -> None:
        """Replace the booking's calendar interval; cancelled or deleted bookings get none"""
        self.repo.remove_calendar_entries(self.db, booking.id)
        if booking.status != BookingStatus.CANCELLED and not booking.deleted:
            self.repo.add_calendar_entry(
                self.db, booking.media_id, booking.id, booking.start_date, booking.end_date
            )
        self.db.commit()

    def remove_from_calendar(self, booking_id: int) -> None:
        removed = self.repo.remove_calendar_entries(self.db, booking_id)
        self.db.commit()
        logger.debug(f"Removed {removed} calendar entries for booking {booking_id}")
