"""Payment router - FastAPI endpoints for payments"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_user, require_editor
from ...database import get_db
from ...models import ActivityAction, ActivityModule, Payment
from ..activity.service import log_activity
from ..bookings.identifiers import load_reference_map
from .schemas import PaymentCreate, PaymentListResponse, PaymentResponse, PaymentStatsResponse
from .service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    """Dependency injection for PaymentService"""
    return PaymentService(db)


def to_payment_response(payment: Payment, references: dict[int, str]) -> PaymentResponse:
    return PaymentResponse(
        id=payment.id,
        bookingId=payment.booking_id,
        bookingRef=references.get(payment.booking_id),
        customerId=payment.customer_id,
        amount=payment.amount,
        mode=payment.mode,
        status=payment.status,
        transactionId=payment.transaction_id,
        receiptUrl=payment.receipt_url,
        notes=payment.notes,
        paidOn=payment.paid_on,
    )


@router.get("", response_model=PaymentListResponse)
async def get_payments(
    bookingId: Optional[int] = Query(None),
    customerId: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    _user: CurrentUser = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    result = service.get_payments(bookingId, customerId, page, limit)
    references = load_reference_map(service.db)
    return PaymentListResponse(
        data=[to_payment_response(p, references) for p in result["data"]],
        total=result["total"],
        page=result["page"],
        pages=result["pages"],
    )


# Registered before /{payment_id} so "stats" is not parsed as an id
@router.get("/stats/summary", response_model=PaymentStatsResponse)
async def get_payment_stats(
    _user: CurrentUser = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    return service.get_stats()


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: int,
    _user: CurrentUser = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    return to_payment_response(service.get_payment(payment_id), load_reference_map(service.db))


@router.post("", response_model=PaymentResponse, status_code=201)
async def create_payment(
    data: PaymentCreate,
    user: CurrentUser = Depends(require_editor),
    service: PaymentService = Depends(get_payment_service),
):
    logger.info(f"📥 Payment of {data.amount} on booking {data.bookingId} by {user.sub}")
    payment = service.record_payment(data)
    references = load_reference_map(service.db)
    log_activity(
        service.db,
        user,
        ActivityAction.CREATE,
        ActivityModule.PAYMENT,
        f"Recorded {payment.mode} payment of {payment.amount} on booking {references.get(payment.booking_id)}",
        {"paymentId": payment.id, "bookingId": payment.booking_id},
    )
    return to_payment_response(payment, references)
