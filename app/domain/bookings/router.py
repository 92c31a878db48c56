"""Booking router - FastAPI endpoints for the booking lifecycle"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_user, require_editor
from ...database import get_db
from ...models import ActivityAction, ActivityModule, Booking
from ..activity.service import log_activity
from .schemas import BookingCancel, BookingCreate, BookingListResponse, BookingResponse, BookingUpdate
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


def to_booking_response(booking: Booking, references: dict[int, str]) -> BookingResponse:
    amount = booking.amount or 0
    paid = booking.amount_paid or 0
    return BookingResponse(
        id=booking.id,
        bookingRef=references.get(booking.id),
        mediaId=booking.media_id,
        mediaName=booking.media.name if booking.media else None,
        customerId=booking.customer_id,
        customerName=(booking.customer.company or booking.customer.name) if booking.customer else None,
        startDate=booking.start_date,
        endDate=booking.end_date,
        status=booking.status,
        amount=amount,
        amountPaid=paid,
        balance=round(max(amount - paid, 0), 2),
        paymentStatus=booking.payment_status,
        paymentMode=booking.payment_mode,
        notes=booking.notes,
        version=booking.version,
        created_at=booking.created_at,
        updated_at=booking.updated_at,
    )


def _list_response(service: BookingService, result: dict) -> BookingListResponse:
    references = service.reference_map()
    return BookingListResponse(
        data=[to_booking_response(b, references) for b in result["data"]],
        total=result["total"],
        page=result["page"],
        pages=result["pages"],
    )


@router.get("", response_model=BookingListResponse)
async def get_bookings(
    status: Optional[str] = Query(None),
    paymentStatus: Optional[str] = Query(None),
    mediaId: Optional[int] = Query(None),
    customerId: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    _user: CurrentUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    result = service.get_bookings(
        page=page,
        limit=limit,
        status=status,
        payment_status=paymentStatus,
        media_id=mediaId,
        customer_id=customerId,
    )
    return _list_response(service, result)


@router.get("/customer/{customer_id}", response_model=BookingListResponse)
async def get_customer_bookings(
    customer_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    _user: CurrentUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    result = service.get_bookings(page=page, limit=limit, customer_id=customer_id)
    return _list_response(service, result)


@router.get("/by-reference", response_model=BookingResponse)
async def get_booking_by_reference(
    ref: str = Query(..., description="Booking reference such as SRA/2425/1042"),
    _user: CurrentUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.get_booking_by_reference(ref)
    return to_booking_response(booking, service.reference_map())


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: int,
    _user: CurrentUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.get_booking(booking_id)
    return to_booking_response(booking, service.reference_map())


@router.post("", response_model=BookingResponse, status_code=201)
async def create_booking(
    data: BookingCreate,
    user: CurrentUser = Depends(require_editor),
    service: BookingService = Depends(get_booking_service),
):
    logger.info(f"📥 Booking request from {user.sub}: media {data.mediaId} {data.startDate}..{data.endDate}")
    booking = service.create_booking(data)
    references = service.reference_map()
    log_activity(
        service.db,
        user,
        ActivityAction.CREATE,
        ActivityModule.BOOKING,
        f"Created booking {references.get(booking.id)}",
        {"bookingId": booking.id, "mediaId": booking.media_id, "amount": booking.amount},
    )
    return to_booking_response(booking, references)


@router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: int,
    data: BookingUpdate,
    user: CurrentUser = Depends(require_editor),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.update_booking(booking_id, data)
    references = service.reference_map()
    log_activity(
        service.db,
        user,
        ActivityAction.UPDATE,
        ActivityModule.BOOKING,
        f"Updated booking {references.get(booking.id)}",
        {"bookingId": booking.id, "changes": data.model_dump(exclude_none=True, mode="json")},
    )
    return to_booking_response(booking, references)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: int,
    data: BookingCancel,
    user: CurrentUser = Depends(require_editor),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.cancel_booking(booking_id, data.version, data.reason)
    references = service.reference_map()
    log_activity(
        service.db,
        user,
        ActivityAction.UPDATE,
        ActivityModule.BOOKING,
        f"Cancelled booking {references.get(booking.id)}",
        {"bookingId": booking.id, "reason": data.reason},
    )
    return to_booking_response(booking, references)


@router.delete("/{booking_id}")
async def delete_booking(
    booking_id: int,
    user: CurrentUser = Depends(require_editor),
    service: BookingService = Depends(get_booking_service),
):
    result = service.delete_booking(booking_id)
    log_activity(
        service.db,
        user,
        ActivityAction.DELETE,
        ActivityModule.BOOKING,
        f"Moved booking {service.reference_map().get(booking_id)} to recycle bin",
        {"bookingId": booking_id},
    )
    return result
