"""Customer router - FastAPI endpoints for customer operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_user, require_editor
from ...database import get_db
from ...models import ActivityAction, ActivityModule, Customer
from ..activity.service import log_activity
from .schemas import CustomerCreate, CustomerListResponse, CustomerResponse, CustomerUpdate
from .service import CustomerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["Customers"])


def get_customer_service(db: Session = Depends(get_db)) -> CustomerService:
    """Dependency injection for CustomerService"""
    return CustomerService(db)


def to_customer_response(c: Customer) -> CustomerResponse:
    return CustomerResponse(
        id=c.id,
        name=c.name,
        company=c.company,
        email=c.email,
        phone=c.phone,
        group=c.customer_group,
        address=c.address,
        gstin=c.gstin,
        totalBookings=c.total_bookings or 0,
        totalSpent=round(c.total_spent or 0, 2),
        created_at=c.created_at,
    )


@router.get("", response_model=CustomerListResponse)
async def get_customers(
    group: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    _user: CurrentUser = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service),
):
    result = service.get_customers(group, search, page, limit)
    return CustomerListResponse(
        data=[to_customer_response(c) for c in result["data"]],
        total=result["total"],
        page=result["page"],
        pages=result["pages"],
    )


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: int,
    _user: CurrentUser = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service),
):
    return to_customer_response(service.get_customer(customer_id))


@router.post("", response_model=CustomerResponse, status_code=201)
async def create_customer(
    data: CustomerCreate,
    user: CurrentUser = Depends(require_editor),
    service: CustomerService = Depends(get_customer_service),
):
    customer = service.create_customer(data)
    log_activity(
        service.db,
        user,
        ActivityAction.CREATE,
        ActivityModule.CUSTOMER,
        f"Added customer {customer.company or customer.name}",
        {"customerId": customer.id},
    )
    return to_customer_response(customer)


@router.patch("/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: int,
    data: CustomerUpdate,
    user: CurrentUser = Depends(require_editor),
    service: CustomerService = Depends(get_customer_service),
):
    customer = service.update_customer(customer_id, data)
    log_activity(
        service.db,
        user,
        ActivityAction.UPDATE,
        ActivityModule.CUSTOMER,
        f"Updated customer {customer.company or customer.name}",
        {"customerId": customer.id, "changes": data.model_dump(exclude_none=True, mode="json")},
    )
    return to_customer_response(customer)


@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: int,
    user: CurrentUser = Depends(require_editor),
    service: CustomerService = Depends(get_customer_service),
):
    result = service.delete_customer(customer_id)
    log_activity(
        service.db,
        user,
        ActivityAction.DELETE,
        ActivityModule.CUSTOMER,
        f"Moved customer {customer_id} to recycle bin",
        {"customerId": customer_id},
    )
    return result


@router.post("/{customer_id}/reconcile", response_model=CustomerResponse)
async def reconcile_customer(
    customer_id: int,
    user: CurrentUser = Depends(require_editor),
    service: CustomerService = Depends(get_customer_service),
):
    """Rebuild totalBookings / totalSpent from the customer's bookings"""
    customer = service.reconcile_customer(customer_id)
    log_activity(
        service.db,
        user,
        ActivityAction.UPDATE,
        ActivityModule.CUSTOMER,
        f"Reconciled totals for customer {customer_id}",
        {"totalBookings": customer.total_bookings, "totalSpent": customer.total_spent},
    )
    return to_customer_response(customer)
