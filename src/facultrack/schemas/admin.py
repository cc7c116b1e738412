"""Admin grant and maintenance schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class AdminGrantCreate(BaseModel):
    """Either a department id or ``is_super_admin``."""

    admin_id: UUID
    department_id: Optional[str] = None
    is_super_admin: bool = False


class AdminGrantRead(BaseModel):
    grant_id: UUID
    admin_id: UUID
    department_id: Optional[str]
    is_super_admin: bool
    granted_by: Optional[UUID]
    created_at: datetime

    class Config:
        from_attributes = True


class SweepSummary(BaseModel):
    candidates: int
    deleted: int
