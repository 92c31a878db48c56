"""Compliance router - FastAPI endpoints for tender agreements and tax installments"""

import logging
from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_user, require_editor
from ...database import get_db
from ...models import ActivityAction, ActivityModule, TaxInstallment, TenderAgreement
from ..activity.service import log_activity
from .installments import agreement_status, installment_display_status
from .schemas import (
    AgreementCreate,
    AgreementResponse,
    AgreementUpdate,
    ComplianceOverview,
    ComplianceStats,
    TaxInstallmentResponse,
    TaxPayment,
)
from .service import ComplianceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/compliance", tags=["Compliance"])


def get_compliance_service(db: Session = Depends(get_db)) -> ComplianceService:
    """Dependency injection for ComplianceService"""
    return ComplianceService(db)


def to_tax_response(tax: TaxInstallment, today: date) -> TaxInstallmentResponse:
    return TaxInstallmentResponse(
        id=tax.id,
        agreementId=tax.agreement_id,
        tenderNumber=tax.tender_number,
        district=tax.district,
        area=tax.area,
        dueDate=tax.due_date,
        amount=tax.amount,
        status=installment_display_status(tax, today),
        paymentDate=tax.payment_date,
        receiptUrl=tax.receipt_url,
    )


def to_agreement_response(agreement: TenderAgreement, today: date) -> AgreementResponse:
    return AgreementResponse(
        id=agreement.id,
        tenderName=agreement.tender_name,
        tenderNumber=agreement.tender_number,
        district=agreement.district,
        area=agreement.area,
        mediaIds=agreement.media_ids or [],
        startDate=agreement.start_date,
        endDate=agreement.end_date,
        taxFrequency=agreement.tax_frequency,
        licenseFee=agreement.license_fee,
        documentUrl=agreement.document_url,
        status=agreement_status(agreement.end_date, today),
        installments=[to_tax_response(t, today) for t in agreement.installments if not t.deleted],
    )


@router.get("", response_model=ComplianceOverview)
async def get_compliance(
    _user: CurrentUser = Depends(get_current_user),
    service: ComplianceService = Depends(get_compliance_service),
):
    """Agreements with read-time status, and every live tax installment"""
    today = service.today()
    overview = service.get_overview()
    return ComplianceOverview(
        tenders=[to_agreement_response(a, today) for a in overview["tenders"]],
        taxes=[to_tax_response(t, today) for t in overview["taxes"]],
    )


@router.get("/stats", response_model=ComplianceStats)
async def get_compliance_stats(
    _user: CurrentUser = Depends(get_current_user),
    service: ComplianceService = Depends(get_compliance_service),
):
    return service.get_stats()


@router.get("/agreements/{agreement_id}", response_model=AgreementResponse)
async def get_agreement(
    agreement_id: int,
    _user: CurrentUser = Depends(get_current_user),
    service: ComplianceService = Depends(get_compliance_service),
):
    return to_agreement_response(service.get_agreement(agreement_id), service.today())


@router.post("/agreements", response_model=AgreementResponse, status_code=201)
async def create_agreement(
    data: AgreementCreate,
    user: CurrentUser = Depends(require_editor),
    service: ComplianceService = Depends(get_compliance_service),
):
    agreement = service.create_agreement(data)
    log_activity(
        service.db,
        user,
        ActivityAction.CREATE,
        ActivityModule.COMPLIANCE,
        f"Added tender agreement {agreement.tender_number}",
        {"agreementId": agreement.id},
    )
    return to_agreement_response(agreement, service.today())


@router.patch("/agreements/{agreement_id}", response_model=AgreementResponse)
async def update_agreement(
    agreement_id: int,
    data: AgreementUpdate,
    user: CurrentUser = Depends(require_editor),
    service: ComplianceService = Depends(get_compliance_service),
):
    agreement = service.update_agreement(agreement_id, data)
    log_activity(
        service.db,
        user,
        ActivityAction.UPDATE,
        ActivityModule.COMPLIANCE,
        f"Updated tender agreement {agreement.tender_number}",
        {"agreementId": agreement.id, "changes": data.model_dump(exclude_none=True, mode="json")},
    )
    return to_agreement_response(agreement, service.today())


@router.delete("/agreements/{agreement_id}")
async def delete_agreement(
    agreement_id: int,
    user: CurrentUser = Depends(require_editor),
    service: ComplianceService = Depends(get_compliance_service),
):
    result = service.delete_agreement(agreement_id)
    log_activity(
        service.db,
        user,
        ActivityAction.DELETE,
        ActivityModule.COMPLIANCE,
        f"Moved tender agreement {agreement_id} to recycle bin",
        {"agreementId": agreement_id},
    )
    return result


@router.post("/taxes/{tax_id}/pay", response_model=TaxInstallmentResponse)
async def pay_tax(
    tax_id: int,
    data: TaxPayment,
    user: CurrentUser = Depends(require_editor),
    service: ComplianceService = Depends(get_compliance_service),
):
    tax = service.pay_tax(tax_id, data.receiptUrl)
    log_activity(
        service.db,
        user,
        ActivityAction.UPDATE,
        ActivityModule.COMPLIANCE,
        f"Paid tax installment for {tax.tender_number}: {tax.amount}",
        {"taxId": tax.id},
    )
    return to_tax_response(tax, service.today())


@router.delete("/taxes/{tax_id}")
async def delete_tax(
    tax_id: int,
    user: CurrentUser = Depends(require_editor),
    service: ComplianceService = Depends(get_compliance_service),
):
    result = service.delete_tax(tax_id)
    log_activity(
        service.db,
        user,
        ActivityAction.DELETE,
        ActivityModule.COMPLIANCE,
        f"Moved tax installment {tax_id} to recycle bin",
        {"taxId": tax_id},
    )
    return result
