"""Maintenance domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_amount

MaintenanceStatusLiteral = Literal["Pending", "In Progress", "Completed"]
MaintenancePriorityLiteral = Literal["Low", "Medium", "High", "Critical"]


class MaintenanceCreate(BaseModel):
    """Reporting a task puts the media unit under Maintenance"""

    mediaId: int
    title: str
    description: Optional[str] = None
    priority: MaintenancePriorityLiteral = "Medium"
    scheduledDate: Optional[date] = None
    cost: Optional[float] = None
    assignedTo: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v or not v.strip():
            raise ValueError("Title is required")
        return v.strip()

    @field_validator("cost")
    @classmethod
    def validate_cost(cls, v):
        return validate_amount(v, "Cost")


class MaintenanceUpdate(BaseModel):
    """Setting status to Completed is the same as calling /complete"""

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[MaintenanceStatusLiteral] = None
    priority: Optional[MaintenancePriorityLiteral] = None
    scheduledDate: Optional[date] = None
    cost: Optional[float] = None
    assignedTo: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("cost")
    @classmethod
    def validate_cost(cls, v):
        return validate_amount(v, "Cost")


class MaintenanceResponse(BaseModel):
    id: int
    mediaId: int
    mediaCode: Optional[str] = None
    mediaStatus: Optional[str] = None
    title: str
    description: Optional[str] = None
    status: str
    priority: str
    scheduledDate: Optional[date] = None
    completedDate: Optional[datetime] = None
    cost: Optional[float] = None
    assignedTo: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class MaintenanceListResponse(BaseModel):
    data: list[MaintenanceResponse]
    total: int
    page: int
    pages: int
