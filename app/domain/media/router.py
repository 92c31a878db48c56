"""Media router - FastAPI endpoints for media units"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_user, require_editor
from ...database import get_db
from ...models import ActivityAction, ActivityModule, MediaUnit
from ..activity.service import log_activity
from .schemas import (
    AvailabilityResponse,
    CalendarEntryResponse,
    MediaCreate,
    MediaListResponse,
    MediaResponse,
    MediaUpdate,
)
from .service import MediaService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/media", tags=["Media"])


def get_media_service(db: Session = Depends(get_db)) -> MediaService:
    """Dependency injection for MediaService"""
    return MediaService(db)


def to_media_response(media: MediaUnit) -> MediaResponse:
    return MediaResponse(
        id=media.id,
        code=media.code,
        name=media.name,
        mediaType=media.media_type,
        state=media.state,
        district=media.district,
        city=media.city,
        address=media.address,
        size=media.size,
        lighting=media.lighting,
        facing=media.facing,
        pricePerMonth=media.price_per_month,
        imageUrl=media.image_url,
        status=media.status,
        calendar=[
            CalendarEntryResponse(bookingId=entry.booking_id, start=entry.start_date, end=entry.end_date)
            for entry in media.calendar
        ],
        created_at=media.created_at,
    )


@router.get("", response_model=MediaListResponse)
async def list_media(
    state: Optional[str] = Query(None),
    district: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    minPrice: Optional[float] = Query(None),
    maxPrice: Optional[float] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    _user: CurrentUser = Depends(get_current_user),
    service: MediaService = Depends(get_media_service),
):
    """List media units with optional location, type, status and price filters"""
    result = service.list_media(
        page=page,
        limit=limit,
        state=state,
        district=district,
        city=city,
        media_type=type,
        status=status,
        search=search,
        min_price=minPrice,
        max_price=maxPrice,
    )
    return MediaListResponse(
        data=[to_media_response(m) for m in result["data"]],
        total=result["total"],
        page=result["page"],
        pages=result["pages"],
    )


@router.get("/{media_id}", response_model=MediaResponse)
async def get_media(
    media_id: int,
    _user: CurrentUser = Depends(get_current_user),
    service: MediaService = Depends(get_media_service),
):
    return to_media_response(service.get_media(media_id))


@router.get("/{media_id}/availability", response_model=AvailabilityResponse)
async def get_media_availability(
    media_id: int,
    start: date = Query(...),
    end: date = Query(...),
    _user: CurrentUser = Depends(get_current_user),
    service: MediaService = Depends(get_media_service),
):
    """Check whether the media unit is free for every day in [start, end]"""
    return AvailabilityResponse(**service.check_availability(media_id, start, end))


@router.post("", response_model=MediaResponse, status_code=201)
async def create_media(
    data: MediaCreate,
    user: CurrentUser = Depends(require_editor),
    service: MediaService = Depends(get_media_service),
):
    media = service.create_media(data)
    log_activity(
        service.db,
        user,
        ActivityAction.CREATE,
        ActivityModule.MEDIA,
        f"Added media {media.code}",
        {"mediaId": media.id},
    )
    return to_media_response(media)


@router.patch("/{media_id}", response_model=MediaResponse)
async def update_media(
    media_id: int,
    data: MediaUpdate,
    user: CurrentUser = Depends(require_editor),
    service: MediaService = Depends(get_media_service),
):
    media = service.update_media(media_id, data)
    log_activity(
        service.db,
        user,
        ActivityAction.UPDATE,
        ActivityModule.MEDIA,
        f"Updated media {media.code}",
        {"mediaId": media.id, "changes": data.model_dump(exclude_none=True, mode="json")},
    )
    return to_media_response(media)


@router.delete("/{media_id}")
async def delete_media(
    media_id: int,
    user: CurrentUser = Depends(require_editor),
    service: MediaService = Depends(get_media_service),
):
    """Move a media unit to the recycle bin"""
    result = service.delete_media(media_id)
    log_activity(
        service.db,
        user,
        ActivityAction.DELETE,
        ActivityModule.MEDIA,
        f"Moved media {media_id} to recycle bin",
        {"mediaId": media_id},
    )
    return result
