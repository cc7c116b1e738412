"""Pydantic schemas for achievement submission and review."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..models import AchievementCategory, AchievementStatus


class AchievementCreate(BaseModel):
    """Request body for submitting an achievement."""

    category: AchievementCategory
    title: str = Field(..., max_length=500)
    date_achieved: date
    description: Optional[str] = Field(None, max_length=5000)
    document_url: Optional[str] = Field(None, description="Object-storage reference to the proof document.")
    remarks: Optional[str] = Field(None, max_length=5000)
    details: Dict[str, Any] = Field(default_factory=dict, description="Category-specific fields.")


class AchievementUpdate(BaseModel):
    """Partial edit; ``details`` replaces the whole category payload."""

    category: Optional[AchievementCategory] = None
    title: Optional[str] = Field(None, max_length=500)
    date_achieved: Optional[date] = None
    description: Optional[str] = Field(None, max_length=5000)
    document_url: Optional[str] = None
    remarks: Optional[str] = Field(None, max_length=5000)
    details: Optional[Dict[str, Any]] = None


class AchievementRead(BaseModel):
    """Achievement response payload."""

    achievement_id: UUID
    teacher_id: UUID
    category: AchievementCategory
    title: str
    date_achieved: date
    description: Optional[str]
    document_url: Optional[str]
    remarks: Optional[str]
    details: Dict[str, Any]
    status: AchievementStatus
    rejection_reason: Optional[str]
    points_awarded: Optional[int]
    reviewed_by: Optional[UUID]
    created_at: datetime
    updated_at: datetime
    status_changed_at: datetime

    class Config:
        from_attributes = True


class ApproveRequest(BaseModel):
    """Approval with the points to award."""

    points: int = Field(..., ge=0, description="Points credited to the teacher.")
    reason: Optional[str] = Field(None, max_length=500)


class RejectRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=2000)


class ReopenRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class CategoryFieldRead(BaseModel):
    name: str
    required: bool
    kind: str
    choices: List[str] = Field(default_factory=list)


class CategorySchemaRead(BaseModel):
    category: AchievementCategory
    label: str
    fields: List[CategoryFieldRead]
