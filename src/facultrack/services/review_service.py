"""Review transitions for achievements.

Pending -> Approved   scoped admin, points >= 0; ledger award in the same unit of work
Pending -> Rejected   scoped admin, non-empty reason
Rejected -> Pending   scoped admin; reason cleared
Approved -> Pending   scoped admin via ``reopen_achievement``; compensating ledger entry

Every transition is a compare-and-set on the current status, so of two admins
racing on one record exactly one wins and the other gets ``ConflictError``.
Nothing here commits: the caller commits the session, then hands
``ReviewOutcome.notification`` to the dispatcher.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from ..core.errors import ConflictError, ValidationError
from ..models import Achievement, AchievementStatus, PointsLedgerEntry
from . import achievement_service, points_service
from .authorization_service import Actor, ensure_can_review
from .notification_service import NotificationEvent, NotificationKind

logger = logging.getLogger(__name__)


@dataclass
class ReviewOutcome:
    """Result of a committed-to-be transition."""

    achievement: Achievement
    ledger_entry: Optional[PointsLedgerEntry] = None
    notification: Optional[NotificationEvent] = None


def _require_status(achievement: Achievement, expected: AchievementStatus, action: str) -> None:
    if achievement.status is not expected:
        raise ConflictError(
            f"Cannot {action} an achievement that is {achievement.status.value}.",
            record_id=achievement.achievement_id,
        )


def _require_reason(reason: Optional[str], achievement_id: UUID) -> str:
    if not isinstance(reason, str) or not reason.strip():
        raise ValidationError("reason", "A rejection reason is required.", record_id=achievement_id)
    return reason.strip()


def approve_achievement(
    session: Session,
    *,
    actor: Actor,
    achievement_id: UUID,
    points: Optional[int],
    reason: Optional[str] = None,
    current_time: datetime | None = None,
) -> ReviewOutcome:
    """Approve a Pending achievement and award ``points`` to its owner."""

    achievement = achievement_service.get_achievement(session, achievement_id)
    ensure_can_review(session, actor, achievement)
    if isinstance(points, bool) or not isinstance(points, int) or points < 0:
        raise ValidationError("points", "points must be a non-negative integer.", record_id=achievement_id)
    _require_status(achievement, AchievementStatus.PENDING, "approve")

    achievement_service.compare_and_set(
        session,
        achievement,
        expected_status=AchievementStatus.PENDING,
        values={
            "status": AchievementStatus.APPROVED,
            "rejection_reason": None,
            "points_awarded": points,
            "reviewed_by": actor.actor_id,
        },
        current_time=current_time,
    )
    entry = points_service.award(
        session,
        teacher_id=achievement.teacher_id,
        points=points,
        admin_id=actor.actor_id,
        achievement_id=achievement.achievement_id,
        reason=(reason or "").strip() or f"Achievement approved: {achievement.achievement_id}",
        current_time=current_time,
    )
    logger.info("achievement %s approved by %s with %d points", achievement_id, actor.actor_id, points)
    return ReviewOutcome(
        achievement=achievement,
        ledger_entry=entry,
        notification=NotificationEvent.for_achievement(NotificationKind.APPROVED, achievement),
    )


def reject_achievement(
    session: Session,
    *,
    actor: Actor,
    achievement_id: UUID,
    reason: Optional[str],
    current_time: datetime | None = None,
) -> ReviewOutcome:
    """Reject a Pending achievement with a reason."""

    achievement = achievement_service.get_achievement(session, achievement_id)
    ensure_can_review(session, actor, achievement)
    cleaned = _require_reason(reason, achievement_id)
    _require_status(achievement, AchievementStatus.PENDING, "reject")

    achievement_service.compare_and_set(
        session,
        achievement,
        expected_status=AchievementStatus.PENDING,
        values={
            "status": AchievementStatus.REJECTED,
            "rejection_reason": cleaned,
            "reviewed_by": actor.actor_id,
        },
        current_time=current_time,
    )
    logger.info("achievement %s rejected by %s", achievement_id, actor.actor_id)
    return ReviewOutcome(
        achievement=achievement,
        notification=NotificationEvent.for_achievement(NotificationKind.REJECTED, achievement, reason=cleaned),
    )


def reset_to_pending(
    session: Session,
    *,
    actor: Actor,
    achievement_id: UUID,
    current_time: datetime | None = None,
) -> ReviewOutcome:
    """Move a Rejected achievement back to Pending."""

    achievement = achievement_service.get_achievement(session, achievement_id)
    ensure_can_review(session, actor, achievement)
    _require_status(achievement, AchievementStatus.REJECTED, "reset")

    achievement_service.compare_and_set(
        session,
        achievement,
        expected_status=AchievementStatus.REJECTED,
        values={
            "status": AchievementStatus.PENDING,
            "rejection_reason": None,
            "reviewed_by": actor.actor_id,
        },
        current_time=current_time,
    )
    logger.info("achievement %s reset to pending by %s", achievement_id, actor.actor_id)
    return ReviewOutcome(achievement=achievement)


def reopen_achievement(
    session: Session,
    *,
    actor: Actor,
    achievement_id: UUID,
    reason: Optional[str] = None,
    current_time: datetime | None = None,
) -> ReviewOutcome:
    """Move an Approved achievement back to Pending, reversing its points.

    ``points_awarded`` stays on the record; the ledger gets a compensating
    entry so a later approval cannot double-count.
    """

    achievement = achievement_service.get_achievement(session, achievement_id)
    ensure_can_review(session, actor, achievement)
    _require_status(achievement, AchievementStatus.APPROVED, "reopen")
    awarded = achievement.points_awarded or 0

    achievement_service.compare_and_set(
        session,
        achievement,
        expected_status=AchievementStatus.APPROVED,
        values={"status": AchievementStatus.PENDING, "reviewed_by": actor.actor_id},
        current_time=current_time,
    )
    entry = points_service.reverse(
        session,
        teacher_id=achievement.teacher_id,
        points=awarded,
        admin_id=actor.actor_id,
        achievement_id=achievement.achievement_id,
        reason=(reason or "").strip() or f"Achievement reopened: {achievement.achievement_id}",
        current_time=current_time,
    )
    logger.info("achievement %s reopened by %s, %d points reversed", achievement_id, actor.actor_id, awarded)
    return ReviewOutcome(achievement=achievement, ledger_entry=entry)
