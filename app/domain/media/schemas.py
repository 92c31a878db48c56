"""Media domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ...shared.validators import validate_amount, validate_date_range, validate_media_code

MediaTypeLiteral = Literal["Unipole", "Hoarding", "Gantry", "Kiosk", "Digital LED"]
# Booked is derived from bookings and cannot be set by an operator
ManualMediaStatus = Literal["Available", "Coming Soon", "Maintenance"]


class MediaCreate(BaseModel):
    """Schema for registering a new media unit"""

    code: str
    name: str
    mediaType: MediaTypeLiteral
    state: str
    district: str
    city: str
    address: Optional[str] = None
    size: Optional[str] = None
    lighting: Optional[str] = None
    facing: Optional[str] = None
    pricePerMonth: float = 0
    imageUrl: Optional[str] = None
    status: ManualMediaStatus = "Available"

    @field_validator("code")
    @classmethod
    def validate_code(cls, v):
        return validate_media_code(v)

    @field_validator("pricePerMonth")
    @classmethod
    def validate_price(cls, v):
        return validate_amount(v, "Price per month")


class MediaUpdate(BaseModel):
    """Schema for updating an existing media unit"""

    name: Optional[str] = None
    mediaType: Optional[MediaTypeLiteral] = None
    state: Optional[str] = None
    district: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    size: Optional[str] = None
    lighting: Optional[str] = None
    facing: Optional[str] = None
    pricePerMonth: Optional[float] = None
    imageUrl: Optional[str] = None
    status: Optional[ManualMediaStatus] = None

    @field_validator("pricePerMonth")
    @classmethod
    def validate_price(cls, v):
        return validate_amount(v, "Price per month")


class CalendarEntryResponse(BaseModel):
    bookingId: int
    start: date
    end: date


class MediaResponse(BaseModel):
    """Schema for media response"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    mediaType: str
    state: str
    district: str
    city: str
    address: Optional[str] = None
    size: Optional[str] = None
    lighting: Optional[str] = None
    facing: Optional[str] = None
    pricePerMonth: float
    imageUrl: Optional[str] = None
    status: str
    calendar: list[CalendarEntryResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class MediaListResponse(BaseModel):
    data: list[MediaResponse]
    total: int
    page: int
    pages: int


class AvailabilityQuery(BaseModel):
    start: date
    end: date

    @model_validator(mode="after")
    def check_range(self):
        validate_date_range(self.start, self.end)
        return self


class AvailabilityResponse(BaseModel):
    mediaId: int
    start: date
    end: date
    available: bool
    blockingBookings: list[str] = Field(default_factory=list)
