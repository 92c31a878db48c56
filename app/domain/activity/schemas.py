"""Activity log schemas"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class ActivityLogResponse(BaseModel):
    id: int
    userId: Optional[str] = None
    username: str
    role: str
    action: str
    module: str
    description: str
    details: dict[str, Any] = {}
    created_at: Optional[datetime] = None


class ActivityLogListResponse(BaseModel):
    data: list[ActivityLogResponse]
    total: int
    page: int
    pages: int
