"""Points ledger and balance projection."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from ..core.errors import ValidationError
from ..models import LedgerEntryType, PointsLedgerEntry, TeacherPointsBalance
from ..utils.datetime import utc_now
from .teacher_service import ensure_teacher

logger = logging.getLogger(__name__)


def _validate_points(points: object) -> int:
    if isinstance(points, bool) or not isinstance(points, int) or points < 0:
        raise ValidationError("points", "points must be a non-negative integer.")
    return points


def _apply_delta(session: Session, teacher_id: UUID, delta: int, now: datetime) -> None:
    # Single UPDATE ... SET current_points = current_points + delta; the row lock
    # it takes serializes concurrent writers for the same teacher.
    stmt = (
        update(TeacherPointsBalance)
        .where(TeacherPointsBalance.teacher_id == teacher_id)
        .values(current_points=TeacherPointsBalance.current_points + delta, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if session.execute(stmt).rowcount == 0:
        # Profiles created before balances were materialized; a racing insert
        # surfaces as IntegrityError at commit and the caller retries.
        session.add(TeacherPointsBalance(teacher_id=teacher_id, current_points=delta, created_at=now, updated_at=now))
    session.flush()


def _append(
    session: Session,
    *,
    teacher_id: UUID,
    entry_type: LedgerEntryType,
    delta: int,
    admin_id: UUID,
    achievement_id: Optional[UUID],
    reason: Optional[str],
    now: datetime,
) -> PointsLedgerEntry:
    entry = PointsLedgerEntry(
        teacher_id=teacher_id,
        achievement_id=achievement_id,
        awarded_by=admin_id,
        entry_type=entry_type,
        points_delta=delta,
        reason=reason,
        created_at=now,
    )
    session.add(entry)
    session.flush()
    _apply_delta(session, teacher_id, delta, now)
    return entry


def award(
    session: Session,
    *,
    teacher_id: UUID,
    points: int,
    admin_id: UUID,
    achievement_id: Optional[UUID] = None,
    reason: Optional[str] = None,
    current_time: datetime | None = None,
) -> PointsLedgerEntry:
    """Append an award entry and move the balance in the same transaction."""

    points = _validate_points(points)
    ensure_teacher(session, teacher_id)
    entry = _append(
        session,
        teacher_id=teacher_id,
        entry_type=LedgerEntryType.AWARD,
        delta=points,
        admin_id=admin_id,
        achievement_id=achievement_id,
        reason=reason,
        now=utc_now(current_time),
    )
    logger.info("awarded %d points to teacher %s (achievement %s)", points, teacher_id, achievement_id)
    return entry


def reverse(
    session: Session,
    *,
    teacher_id: UUID,
    points: int,
    admin_id: UUID,
    achievement_id: Optional[UUID] = None,
    reason: Optional[str] = None,
    current_time: datetime | None = None,
) -> PointsLedgerEntry:
    """Append a compensating entry cancelling ``points`` previously awarded."""

    points = _validate_points(points)
    ensure_teacher(session, teacher_id)
    entry = _append(
        session,
        teacher_id=teacher_id,
        entry_type=LedgerEntryType.REVERSAL,
        delta=-points,
        admin_id=admin_id,
        achievement_id=achievement_id,
        reason=reason,
        now=utc_now(current_time),
    )
    logger.info("reversed %d points for teacher %s (achievement %s)", points, teacher_id, achievement_id)
    return entry


def get_balance(session: Session, teacher_id: UUID) -> int:
    """Return the materialized balance, 0 for a teacher without one."""

    stmt = select(TeacherPointsBalance.current_points).where(TeacherPointsBalance.teacher_id == teacher_id)
    return session.execute(stmt).scalar_one_or_none() or 0


def ledger_total(session: Session, teacher_id: UUID) -> int:
    stmt = select(func.coalesce(func.sum(PointsLedgerEntry.points_delta), 0)).where(
        PointsLedgerEntry.teacher_id == teacher_id
    )
    return session.execute(stmt).scalar_one()


def list_history(
    session: Session,
    *,
    teacher_id: UUID,
    limit: int = 50,
    offset: int = 0,
) -> Sequence[PointsLedgerEntry]:
    """Return ledger entries for a teacher, newest first."""

    stmt = (
        select(PointsLedgerEntry)
        .where(PointsLedgerEntry.teacher_id == teacher_id)
        .order_by(PointsLedgerEntry.created_at.desc(), PointsLedgerEntry.entry_id.desc())
        .offset(offset)
        .limit(limit)
    )
    return session.execute(stmt).scalars().all()


def entries_for_achievement(session: Session, achievement_id: UUID) -> Sequence[PointsLedgerEntry]:
    stmt = (
        select(PointsLedgerEntry)
        .where(PointsLedgerEntry.achievement_id == achievement_id)
        .order_by(PointsLedgerEntry.entry_id.asc())
    )
    return session.execute(stmt).scalars().all()


def reconcile_balance(session: Session, teacher_id: UUID, *, current_time: datetime | None = None) -> int:
    """Rewrite the materialized balance from the ledger sum and return it."""

    ensure_teacher(session, teacher_id)
    balance = session.execute(
        select(TeacherPointsBalance).where(TeacherPointsBalance.teacher_id == teacher_id).with_for_update()
    ).scalar_one_or_none()
    total = ledger_total(session, teacher_id)
    now = utc_now(current_time)

    if balance is None:
        session.add(TeacherPointsBalance(teacher_id=teacher_id, current_points=total, created_at=now, updated_at=now))
    elif balance.current_points != total:
        logger.warning(
            "balance drift for teacher %s: stored %d, ledger %d",
            teacher_id,
            balance.current_points,
            total,
        )
        balance.current_points = total
        balance.updated_at = now
    session.flush()
    return total
