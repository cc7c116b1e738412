"""Department targets and per-teacher target evaluation."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.errors import ValidationError
from ..models import DepartmentTarget
from ..utils.datetime import utc_now, utc_today
from . import points_service
from .authorization_service import Actor, Operation, ensure_can_act
from .department_service import ensure_department
from .teacher_service import ensure_teacher

logger = logging.getLogger(__name__)


class TargetStatus(str, enum.Enum):
    ACHIEVED = "ACHIEVED"
    IN_PROGRESS = "IN_PROGRESS"
    EXPIRED = "EXPIRED"
    NO_ACTIVE_TARGET = "NO_ACTIVE_TARGET"


@dataclass
class TargetEvaluation:
    """A teacher's standing against their department's active target."""

    teacher_id: UUID
    department_id: str
    current_points: int
    status: TargetStatus
    target_points: Optional[int] = None
    target_date: Optional[date] = None
    benefits: list[str] = field(default_factory=list)


def _coerce_target_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ValidationError("target_date", "target_date must be an ISO date (YYYY-MM-DD).") from exc


def create_target(
    session: Session,
    *,
    actor: Actor,
    department_id: str,
    target_points: int,
    target_date: date | str,
    benefits: Optional[Iterable[str]] = None,
    current_time: datetime | None = None,
) -> DepartmentTarget:
    """Record a new target; it supersedes earlier ones for the department."""

    ensure_department(session, department_id)
    ensure_can_act(session, actor, Operation.MANAGE_TARGETS, department_id, record_id=department_id)

    if isinstance(target_points, bool) or not isinstance(target_points, int) or target_points < 0:
        raise ValidationError("target_points", "target_points must be a non-negative integer.")
    due = _coerce_target_date(target_date)
    cleaned_benefits = [item.strip() for item in (benefits or []) if isinstance(item, str) and item.strip()]

    target = DepartmentTarget(
        department_id=department_id,
        target_points=target_points,
        target_date=due,
        benefits=cleaned_benefits,
        created_by=actor.actor_id,
        created_at=utc_now(current_time),
    )
    session.add(target)
    session.flush()
    logger.info("target of %d points due %s set for department %s", target_points, due, department_id)
    return target


def active_target(session: Session, department_id: str) -> Optional[DepartmentTarget]:
    """Return the most recently created target of a department.

    Targets created in the same instant are ordered by id, so the active one
    is always the head of ``list_targets``.
    """

    stmt = (
        select(DepartmentTarget)
        .where(DepartmentTarget.department_id == department_id)
        .order_by(DepartmentTarget.created_at.desc(), DepartmentTarget.target_id.desc())
        .limit(1)
    )
    return session.execute(stmt).scalar_one_or_none()


def list_targets(session: Session, *, department_id: str, limit: int = 50, offset: int = 0) -> Sequence[DepartmentTarget]:
    stmt = (
        select(DepartmentTarget)
        .where(DepartmentTarget.department_id == department_id)
        .order_by(DepartmentTarget.created_at.desc(), DepartmentTarget.target_id.desc())
        .offset(offset)
        .limit(limit)
    )
    return session.execute(stmt).scalars().all()


def evaluate(session: Session, teacher_id: UUID, *, current_time: datetime | None = None) -> TargetEvaluation:
    """Compare a teacher's balance with the active target of their department."""

    teacher = ensure_teacher(session, teacher_id)
    current_points = points_service.get_balance(session, teacher_id)
    target = active_target(session, teacher.department_id)

    if target is None:
        return TargetEvaluation(
            teacher_id=teacher_id,
            department_id=teacher.department_id,
            current_points=current_points,
            status=TargetStatus.NO_ACTIVE_TARGET,
        )

    evaluation = TargetEvaluation(
        teacher_id=teacher_id,
        department_id=teacher.department_id,
        current_points=current_points,
        status=TargetStatus.IN_PROGRESS,
        target_points=target.target_points,
        target_date=target.target_date,
    )
    if target.target_date < utc_today(current_time):
        evaluation.status = TargetStatus.EXPIRED
        return evaluation

    if current_points >= target.target_points:
        evaluation.status = TargetStatus.ACHIEVED
    evaluation.benefits = list(target.benefits or [])
    return evaluation
