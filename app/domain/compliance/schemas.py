"""Compliance domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator, model_validator

from ...shared.validators import validate_amount, validate_date_range

TaxFrequencyLiteral = Literal["Monthly", "Quarterly", "Half-Yearly", "Yearly", "One-Time"]


class AgreementCreate(BaseModel):
    """Schema for creating a tender agreement; installments are generated from it"""

    tenderName: str
    tenderNumber: str
    district: str
    area: Optional[str] = None
    mediaIds: list[int] = []
    startDate: date
    endDate: date
    taxFrequency: TaxFrequencyLiteral = "Yearly"
    licenseFee: float
    documentUrl: Optional[str] = None

    @field_validator("tenderName", "tenderNumber", "district")
    @classmethod
    def validate_required(cls, v):
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator("licenseFee")
    @classmethod
    def validate_fee(cls, v):
        return validate_amount(v, "License fee")

    @model_validator(mode="after")
    def check_dates(self):
        validate_date_range(self.startDate, self.endDate)
        return self


class AgreementUpdate(BaseModel):
    tenderName: Optional[str] = None
    district: Optional[str] = None
    area: Optional[str] = None
    mediaIds: Optional[list[int]] = None
    startDate: Optional[date] = None
    endDate: Optional[date] = None
    taxFrequency: Optional[TaxFrequencyLiteral] = None
    licenseFee: Optional[float] = None
    documentUrl: Optional[str] = None

    @field_validator("licenseFee")
    @classmethod
    def validate_fee(cls, v):
        return validate_amount(v, "License fee")

    @model_validator(mode="after")
    def check_dates(self):
        validate_date_range(self.startDate, self.endDate)
        return self


class TaxPayment(BaseModel):
    receiptUrl: Optional[str] = None


class TaxInstallmentResponse(BaseModel):
    id: int
    agreementId: int
    tenderNumber: Optional[str] = None
    district: Optional[str] = None
    area: Optional[str] = None
    dueDate: date
    amount: float
    status: str
    paymentDate: Optional[datetime] = None
    receiptUrl: Optional[str] = None


class AgreementResponse(BaseModel):
    id: int
    tenderName: str
    tenderNumber: str
    district: str
    area: Optional[str] = None
    mediaIds: list[int] = []
    startDate: date
    endDate: date
    taxFrequency: str
    licenseFee: float
    documentUrl: Optional[str] = None
    status: str
    installments: list[TaxInstallmentResponse] = []


class ComplianceOverview(BaseModel):
    tenders: list[AgreementResponse]
    taxes: list[TaxInstallmentResponse]


class ComplianceStats(BaseModel):
    totalActiveTenders: int
    expiringTenders: int
    pendingTaxes: int
    overdueTaxes: int
    totalTaxPaid: float
    totalTaxLiability: float
