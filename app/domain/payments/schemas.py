"""Payment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ..bookings.schemas import PaymentModeLiteral


class PaymentCreate(BaseModel):
    """Schema for recording a payment against a booking"""

    bookingId: int
    amount: float
    mode: PaymentModeLiteral
    version: Optional[int] = None  # booking version the operator was looking at
    transactionId: Optional[str] = None
    receiptUrl: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        if v <= 0:
            raise ValueError("Payment amount must be greater than zero")
        return round(float(v), 2)


class PaymentResponse(BaseModel):
    id: int
    bookingId: int
    bookingRef: Optional[str] = None
    customerId: int
    amount: float
    mode: str
    status: Literal["Completed", "Pending", "Failed", "Cancelled"]
    transactionId: Optional[str] = None
    receiptUrl: Optional[str] = None
    notes: Optional[str] = None
    paidOn: Optional[datetime] = None


class PaymentListResponse(BaseModel):
    data: list[PaymentResponse]
    total: int
    page: int
    pages: int


class PaymentStatsResponse(BaseModel):
    totalCollected: float
    pending: float
    overdue: float
