"""Recycle bin schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

EntityTypeLiteral = Literal["media", "booking", "customer", "agreement", "tax"]


class RecycleBinItem(BaseModel):
    id: int
    type: EntityTypeLiteral
    displayName: str
    subText: Optional[str] = None
    deletedAt: Optional[datetime] = None
    daysRemaining: int


class RestoreRequest(BaseModel):
    id: int
    type: EntityTypeLiteral


class PurgeSummary(BaseModel):
    agreements: int
    taxes: int
