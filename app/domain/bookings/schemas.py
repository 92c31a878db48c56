"""Booking domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, model_validator, field_validator

from ...shared.validators import validate_amount, validate_date_range

BookingStatusLiteral = Literal["Upcoming", "Active", "Completed", "Cancelled"]
PaymentModeLiteral = Literal["Cash", "Cheque", "Online", "Bank Transfer"]


class BookingCreate(BaseModel):
    """Schema for creating a booking; status is always derived from the dates"""

    mediaId: int
    customerId: int
    startDate: date
    endDate: date
    amount: float
    amountPaid: float = 0
    paymentMode: Optional[PaymentModeLiteral] = None
    notes: Optional[str] = None

    @field_validator("amount", "amountPaid")
    @classmethod
    def validate_amounts(cls, v):
        return validate_amount(v)

    @model_validator(mode="after")
    def check_dates(self):
        validate_date_range(self.startDate, self.endDate)
        return self


class BookingUpdate(BaseModel):
    """
    Schema for updating a booking.

    ``version`` is the version the caller read; a mismatch is a stale write.
    ``autoStatus`` makes the status rule explicit:

    - ``True``: re-derive status from the dates (``status`` must be omitted)
    - ``False``: keep the stored status unless ``status`` is given
    - omitted: re-derive only when a date changed and no ``status`` was sent
    """

    version: Optional[int] = None
    mediaId: Optional[int] = None
    customerId: Optional[int] = None
    startDate: Optional[date] = None
    endDate: Optional[date] = None
    amount: Optional[float] = None
    amountPaid: Optional[float] = None
    paymentMode: Optional[PaymentModeLiteral] = None
    notes: Optional[str] = None
    status: Optional[BookingStatusLiteral] = None
    autoStatus: Optional[bool] = None

    @field_validator("amount", "amountPaid")
    @classmethod
    def validate_amounts(cls, v):
        return validate_amount(v)

    @model_validator(mode="after")
    def check_consistency(self):
        validate_date_range(self.startDate, self.endDate)
        if self.autoStatus is True and self.status is not None:
            raise ValueError("Send either status or autoStatus=true, not both")
        return self


class BookingCancel(BaseModel):
    version: Optional[int] = None
    reason: Optional[str] = None


class BookingResponse(BaseModel):
    """Schema for booking response"""

    id: int
    bookingRef: Optional[str] = None
    mediaId: int
    mediaName: Optional[str] = None
    customerId: int
    customerName: Optional[str] = None
    startDate: date
    endDate: date
    status: str
    amount: float
    amountPaid: float
    balance: float
    paymentStatus: str
    paymentMode: Optional[str] = None
    notes: Optional[str] = None
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookingListResponse(BaseModel):
    data: list[BookingResponse]
    total: int
    page: int
    pages: int
