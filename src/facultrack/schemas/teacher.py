"""Pydantic schemas for teacher profiles and departments."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class DepartmentRead(BaseModel):
    """Catalog entry."""

    department_id: str
    name: str

    class Config:
        from_attributes = True


class TeacherCreate(BaseModel):
    """Profile submitted by a teacher on first sign-in."""

    full_name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    department_id: str = Field(..., description="Department catalog id")
    designation: Optional[str] = Field(None, max_length=120)


class TeacherRead(BaseModel):
    """Teacher profile payload."""

    teacher_id: UUID
    full_name: str
    email: str
    department_id: str
    designation: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True
