"""Points ledger and target schemas."""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..models import LedgerEntryType
from ..services.target_service import TargetStatus


class LedgerEntryRead(BaseModel):
    """One ledger movement."""

    entry_id: int
    teacher_id: UUID
    achievement_id: Optional[UUID]
    awarded_by: UUID
    entry_type: LedgerEntryType
    points_delta: int
    reason: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class PointsSummary(BaseModel):
    teacher_id: UUID
    current_points: int
    history: List[LedgerEntryRead]


class TargetCreate(BaseModel):
    target_points: int = Field(..., ge=0)
    target_date: date
    benefits: List[str] = Field(default_factory=list)


class TargetRead(BaseModel):
    target_id: UUID
    department_id: str
    target_points: int
    target_date: date
    benefits: List[str]
    created_by: UUID
    created_at: datetime

    class Config:
        from_attributes = True


class TargetEvaluationRead(BaseModel):
    """Teacher standing against the active department target."""

    teacher_id: UUID
    department_id: str
    current_points: int
    status: TargetStatus
    target_points: Optional[int]
    target_date: Optional[date]
    benefits: List[str]

    class Config:
        from_attributes = True
