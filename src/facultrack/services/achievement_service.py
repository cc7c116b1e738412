"""Achievement record store.

Reads and writes achievement rows. Authorization is the caller's job; every
write that depends on the current status goes through ``compare_and_set`` so
two writers racing on one record cannot both win.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session, joinedload

from ..core.errors import ConflictError, NotFoundError, ValidationError
from ..models import Achievement, AchievementCategory, AchievementStatus, Teacher
from ..utils.datetime import utc_now
from .category_registry import FieldKind, FieldSpec, validate_details
from .teacher_service import ensure_teacher

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"title", "date_achieved", "description", "document_url", "remarks", "details", "category"})

_DOCUMENT_URL = FieldSpec("document_url", FieldKind.URL)


def _coerce_category(category: AchievementCategory | str) -> AchievementCategory:
    try:
        return AchievementCategory(category)
    except ValueError as exc:
        raise ValidationError("category", f"Unknown achievement category: {category}") from exc


def _coerce_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("title", "title is required.")
    return title.strip()


def _coerce_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise ValidationError("date_achieved", "date_achieved must be an ISO date (YYYY-MM-DD).")


def _coerce_optional_text(value: Any, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(field_name, f"{field_name} must be text.")
    return value.strip() or None


def _coerce_document_url(value: Any) -> Optional[str]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return _DOCUMENT_URL.normalize(value)


def get_achievement(session: Session, achievement_id: UUID) -> Achievement:
    stmt = (
        select(Achievement)
        .options(joinedload(Achievement.teacher))
        .where(Achievement.achievement_id == achievement_id)
    )
    achievement = session.execute(stmt).scalar_one_or_none()
    if achievement is None:
        raise NotFoundError(f"Achievement {achievement_id} not found", record_id=achievement_id)
    return achievement


def create_achievement(
    session: Session,
    *,
    teacher_id: UUID,
    category: AchievementCategory | str,
    title: str,
    date_achieved: date | str,
    details: Optional[Mapping[str, Any]] = None,
    description: Optional[str] = None,
    document_url: Optional[str] = None,
    remarks: Optional[str] = None,
    current_time: datetime | None = None,
) -> Achievement:
    """Validate and insert a new Pending achievement."""

    ensure_teacher(session, teacher_id)
    category = _coerce_category(category)
    normalized_title = _coerce_title(title)
    achieved_on = _coerce_date(date_achieved)
    normalized_details = validate_details(category, details)

    now = utc_now(current_time)
    achievement = Achievement(
        teacher_id=teacher_id,
        category=category,
        title=normalized_title,
        date_achieved=achieved_on,
        description=_coerce_optional_text(description, "description"),
        document_url=_coerce_document_url(document_url),
        remarks=_coerce_optional_text(remarks, "remarks"),
        details=normalized_details,
        status=AchievementStatus.PENDING,
        version=1,
        created_at=now,
        updated_at=now,
        status_changed_at=now,
    )
    session.add(achievement)
    session.flush()
    logger.info("achievement %s (%s) submitted by teacher %s", achievement.achievement_id, category.value, teacher_id)
    return achievement


def compare_and_set(
    session: Session,
    achievement: Achievement,
    *,
    expected_status: AchievementStatus,
    values: Mapping[str, Any],
    current_time: datetime | None = None,
    check_version: bool = False,
) -> Achievement:
    """Write ``values`` only if the row still has ``expected_status``.

    Raises ``ConflictError`` when another writer got there first.
    """

    now = utc_now(current_time)
    conditions = [
        Achievement.achievement_id == achievement.achievement_id,
        Achievement.status == expected_status,
    ]
    if check_version:
        conditions.append(Achievement.version == achievement.version)

    payload = dict(values)
    payload.setdefault("updated_at", now)
    if payload.get("status", expected_status) != expected_status:
        payload.setdefault("status_changed_at", now)
    payload["version"] = Achievement.version + 1

    stmt = update(Achievement).where(*conditions).values(**payload).execution_options(synchronize_session=False)
    result = session.execute(stmt)
    if result.rowcount != 1:
        raise ConflictError(
            f"Achievement {achievement.achievement_id} changed concurrently; refetch and retry.",
            record_id=achievement.achievement_id,
        )
    session.refresh(achievement)
    return achievement


def update_achievement(
    session: Session,
    *,
    achievement_id: UUID,
    changes: Mapping[str, Any],
    current_time: datetime | None = None,
) -> Achievement:
    """Edit a Pending or Rejected achievement in place.

    Editing a Rejected record clears its reason and resubmits it as Pending.
    Approved records are frozen. The category cannot change.
    """

    achievement = get_achievement(session, achievement_id)
    if achievement.status is AchievementStatus.APPROVED:
        raise ConflictError("Approved achievements cannot be edited.", record_id=achievement_id)

    unknown = sorted(set(changes) - EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(unknown[0], f"{unknown[0]} cannot be edited.", record_id=achievement_id)

    if "category" in changes and _coerce_category(changes["category"]) is not achievement.category:
        raise ValidationError("category", "The category of an achievement cannot change.", record_id=achievement_id)

    values: dict[str, Any] = {}
    if "title" in changes:
        values["title"] = _coerce_title(changes["title"])
    if "date_achieved" in changes:
        values["date_achieved"] = _coerce_date(changes["date_achieved"])
    if "description" in changes:
        values["description"] = _coerce_optional_text(changes["description"], "description")
    if "remarks" in changes:
        values["remarks"] = _coerce_optional_text(changes["remarks"], "remarks")
    if "document_url" in changes:
        values["document_url"] = _coerce_document_url(changes["document_url"])
    if "details" in changes:
        values["details"] = validate_details(achievement.category, changes["details"])

    previous_status = achievement.status
    if previous_status is AchievementStatus.REJECTED:
        values["status"] = AchievementStatus.PENDING
        values["rejection_reason"] = None

    compare_and_set(
        session,
        achievement,
        expected_status=previous_status,
        values=values,
        current_time=current_time,
        check_version=True,
    )
    if previous_status is AchievementStatus.REJECTED:
        logger.info("achievement %s corrected and resubmitted", achievement_id)
    return achievement


def list_by_teacher(
    session: Session,
    *,
    teacher_id: UUID,
    status: Optional[AchievementStatus] = None,
    limit: int = 50,
    offset: int = 0,
) -> Sequence[Achievement]:
    """Return a teacher's achievements, newest first."""

    stmt = (
        select(Achievement)
        .where(Achievement.teacher_id == teacher_id)
        .order_by(Achievement.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    if status:
        stmt = stmt.where(Achievement.status == status)
    return session.execute(stmt).scalars().all()


def list_by_department(
    session: Session,
    *,
    department_id: str,
    status: Optional[AchievementStatus] = None,
    limit: int = 50,
    offset: int = 0,
) -> Sequence[Achievement]:
    """Return achievements owned by teachers currently in ``department_id``."""

    stmt = (
        select(Achievement)
        .join(Teacher, Teacher.teacher_id == Achievement.teacher_id)
        .options(joinedload(Achievement.teacher))
        .where(Teacher.department_id == department_id)
        .order_by(Achievement.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    if status:
        stmt = stmt.where(Achievement.status == status)
    return session.execute(stmt).scalars().all()


def delete_achievement(
    session: Session,
    achievement_id: UUID,
    *,
    expected_status: AchievementStatus = AchievementStatus.REJECTED,
) -> bool:
    """Hard-delete a record if it still has ``expected_status``.

    Returns ``False`` when the row is gone or has moved to another status.
    """

    stmt = (
        delete(Achievement)
        .where(Achievement.achievement_id == achievement_id, Achievement.status == expected_status)
        .execution_options(synchronize_session=False)
    )
    return session.execute(stmt).rowcount == 1


def ids_matching(
    session: Session,
    *,
    status: AchievementStatus,
    created_before: datetime,
) -> list[UUID]:
    stmt = select(Achievement.achievement_id).where(
        Achievement.status == status,
        Achievement.created_at < created_before,
    )
    return list(session.execute(stmt).scalars().all())