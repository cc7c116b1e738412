"""Teacher profile registration and lookup."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.errors import ConflictError, NotFoundError
from ..models import Teacher, TeacherPointsBalance
from ..utils.datetime import utc_now
from .department_service import ensure_department

logger = logging.getLogger(__name__)


def ensure_teacher(session: Session, teacher_id: UUID) -> Teacher:
    teacher = session.get(Teacher, teacher_id)
    if teacher is None:
        raise NotFoundError(f"Teacher {teacher_id} not found", record_id=teacher_id)
    return teacher


def register_teacher(
    session: Session,
    *,
    teacher_id: UUID,
    full_name: str,
    email: str,
    department_id: str,
    designation: Optional[str] = None,
    current_time: datetime | None = None,
) -> Teacher:
    """Create a teacher profile together with its zero points balance."""

    ensure_department(session, department_id)
    if session.get(Teacher, teacher_id) is not None:
        raise ConflictError("Teacher profile already exists.", record_id=teacher_id)

    email_taken = session.execute(select(Teacher.teacher_id).where(Teacher.email == email)).scalar_one_or_none()
    if email_taken is not None:
        raise ConflictError(f"Email {email} is already registered.")

    now = utc_now(current_time)
    teacher = Teacher(
        teacher_id=teacher_id,
        full_name=full_name.strip(),
        email=email.strip(),
        department_id=department_id,
        designation=designation,
        created_at=now,
        updated_at=now,
    )
    session.add(teacher)
    session.add(TeacherPointsBalance(teacher_id=teacher_id, current_points=0, created_at=now, updated_at=now))
    session.flush()
    logger.info("registered teacher %s in department %s", teacher_id, department_id)
    return teacher
