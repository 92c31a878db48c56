"""Customer domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ...shared.validators import validate_email, validate_in_phone


class CustomerCreate(BaseModel):
    """Schema for creating a new customer"""

    name: str
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    group: Optional[str] = None
    address: Optional[str] = None
    gstin: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_in_phone(v)
        return v

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)


class CustomerUpdate(BaseModel):
    """Schema for updating an existing customer"""

    name: Optional[str] = None
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    group: Optional[str] = None
    address: Optional[str] = None
    gstin: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_in_phone(v)
        return v

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)


class CustomerResponse(BaseModel):
    """Schema for customer response"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    group: Optional[str] = None
    address: Optional[str] = None
    gstin: Optional[str] = None
    totalBookings: int
    totalSpent: float
    created_at: Optional[datetime] = None


class CustomerListResponse(BaseModel):
    data: list[CustomerResponse]
    total: int
    page: int
    pages: int
