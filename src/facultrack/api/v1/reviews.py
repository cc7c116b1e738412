"""Admin review endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...core.database import commit_or_raise, get_db
from ...core.errors import PortalError
from ...schemas import AchievementRead, ApproveRequest, RejectRequest, ReopenRequest
from ...services import review_service
from ...services.authorization_service import Actor
from ...services.notification_service import NotificationDispatcher
from ...services.review_service import ReviewOutcome
from ..deps import get_current_actor, get_notification_dispatcher, raise_http

router = APIRouter(prefix="/achievements", tags=["reviews"])

_REVIEW_RESPONSES = {
    403: {"description": "Actor not authorized for the owner's department"},
    404: {"description": "Achievement not found"},
    409: {"description": "Achievement not in the required state, or another review won"},
    422: {"description": "Missing points or reason"},
}


def _finish(
    db: Session,
    outcome: ReviewOutcome,
    background_tasks: BackgroundTasks,
    dispatcher: NotificationDispatcher,
) -> AchievementRead:
    commit_or_raise(db)
    if outcome.notification is not None:
        background_tasks.add_task(dispatcher.notify, outcome.notification)
    db.refresh(outcome.achievement)
    return outcome.achievement


@router.post(
    "/{achievement_id}/approve",
    response_model=AchievementRead,
    summary="Approve and award points",
    responses=_REVIEW_RESPONSES,
)
def approve(
    achievement_id: UUID,
    payload: ApproveRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(get_current_actor),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    db: Session = Depends(get_db),
) -> AchievementRead:
    """Approve a pending achievement.

    Example request body::

        {
            "points": 10,
            "reason": "Scopus-indexed Q2 journal"
        }
    """

    try:
        outcome = review_service.approve_achievement(
            db,
            actor=actor,
            achievement_id=achievement_id,
            points=payload.points,
            reason=payload.reason,
        )
        return _finish(db, outcome, background_tasks, dispatcher)
    except (PortalError, SQLAlchemyError) as exc:
        raise_http(db, exc, record_id=achievement_id)


@router.post(
    "/{achievement_id}/reject",
    response_model=AchievementRead,
    summary="Reject with a reason",
    responses=_REVIEW_RESPONSES,
)
def reject(
    achievement_id: UUID,
    payload: RejectRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(get_current_actor),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    db: Session = Depends(get_db),
) -> AchievementRead:
    """Reject a pending achievement; the teacher is told why."""

    try:
        outcome = review_service.reject_achievement(
            db,
            actor=actor,
            achievement_id=achievement_id,
            reason=payload.reason,
        )
        return _finish(db, outcome, background_tasks, dispatcher)
    except (PortalError, SQLAlchemyError) as exc:
        raise_http(db, exc, record_id=achievement_id)


@router.post(
    "/{achievement_id}/reset",
    response_model=AchievementRead,
    summary="Return a rejected achievement to pending",
    responses=_REVIEW_RESPONSES,
)
def reset(
    achievement_id: UUID,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(get_current_actor),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    db: Session = Depends(get_db),
) -> AchievementRead:
    try:
        outcome = review_service.reset_to_pending(db, actor=actor, achievement_id=achievement_id)
        return _finish(db, outcome, background_tasks, dispatcher)
    except (PortalError, SQLAlchemyError) as exc:
        raise_http(db, exc, record_id=achievement_id)


@router.post(
    "/{achievement_id}/reopen",
    response_model=AchievementRead,
    summary="Reopen an approved achievement, reversing its points",
    responses=_REVIEW_RESPONSES,
)
def reopen(
    achievement_id: UUID,
    payload: ReopenRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(get_current_actor),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    db: Session = Depends(get_db),
) -> AchievementRead:
    """Send an approved achievement back to pending with a compensating ledger entry."""

    try:
        outcome = review_service.reopen_achievement(
            db,
            actor=actor,
            achievement_id=achievement_id,
            reason=payload.reason,
        )
        return _finish(db, outcome, background_tasks, dispatcher)
    except (PortalError, SQLAlchemyError) as exc:
        raise_http(db, exc, record_id=achievement_id)
