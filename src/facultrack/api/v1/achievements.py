"""Teacher self-service endpoints for achievements."""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...core.database import commit_or_raise, get_db
from ...core.errors import PortalError
from ...models import AchievementStatus
from ...schemas import AchievementCreate, AchievementRead, AchievementUpdate
from ...services import achievement_service
from ...services.authorization_service import (
    Actor,
    ActorRole,
    Operation,
    department_of_teacher,
    ensure_can_act,
)
from ..deps import get_current_actor, raise_http, require_role

router = APIRouter(prefix="/achievements", tags=["achievements"])


@router.post(
    "",
    response_model=AchievementRead,
    status_code=status.HTTP_201_CREATED,
    summary="Submit an achievement",
    responses={
        201: {
            "description": "Achievement recorded as pending",
            "content": {
                "application/json": {
                    "example": {
                        "achievement_id": "44444444-4444-4444-4444-444444444444",
                        "teacher_id": "aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa",
                        "category": "JOURNAL_ARTICLE",
                        "title": "Graph pruning for edge inference",
                        "date_achieved": "2025-10-02",
                        "description": None,
                        "document_url": "https://storage.example.edu/proofs/44444444.pdf",
                        "remarks": None,
                        "details": {
                            "doi": "10.1000/xyz123",
                            "journal_name": "Journal of Edge Systems",
                            "indexed_in": ["Scopus", "SCIE"],
                            "q_ranking": "Q2",
                        },
                        "status": "PENDING",
                        "rejection_reason": None,
                        "points_awarded": None,
                        "reviewed_by": None,
                        "created_at": "2025-11-12T10:15:30",
                        "updated_at": "2025-11-12T10:15:30",
                        "status_changed_at": "2025-11-12T10:15:30",
                    }
                }
            },
        },
        403: {"description": "Caller is not a teacher"},
        404: {"description": "Teacher profile not found"},
        422: {"description": "Category schema violation"},
    },
)
def submit_achievement(
    payload: AchievementCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> AchievementRead:
    """Record an achievement for the calling teacher.

    Example request body::

        {
            "category": "PATENT",
            "title": "Low-power sensor mesh",
            "date_achieved": "2025-09-14",
            "details": {
                "patent_number": "IN202511012345",
                "patent_office": "Indian Patent Office",
                "patent_status": "Filed"
            }
        }
    """

    require_role(actor, ActorRole.TEACHER)
    try:
        department_id = department_of_teacher(db, actor.actor_id)
        ensure_can_act(db, actor, Operation.SUBMIT, department_id, owner_id=actor.actor_id)
        achievement = achievement_service.create_achievement(
            db,
            teacher_id=actor.actor_id,
            category=payload.category,
            title=payload.title,
            date_achieved=payload.date_achieved,
            details=payload.details,
            description=payload.description,
            document_url=payload.document_url,
            remarks=payload.remarks,
        )
        commit_or_raise(db)
        db.refresh(achievement)
        return achievement
    except (PortalError, SQLAlchemyError) as exc:
        raise_http(db, exc)


@router.get(
    "",
    response_model=List[AchievementRead],
    summary="List my achievements",
)
def list_my_achievements(
    *,
    status_filter: Optional[AchievementStatus] = Query(None, alias="status", description="Filter by review status"),
    limit: int = Query(50, ge=1, le=100, description="Maximum items to return"),
    offset: int = Query(0, ge=0, description="Items to skip for pagination"),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> List[AchievementRead]:
    """Return the calling teacher's achievements, newest first."""

    require_role(actor, ActorRole.TEACHER)
    try:
        achievements = achievement_service.list_by_teacher(
            db,
            teacher_id=actor.actor_id,
            status=status_filter,
            limit=limit,
            offset=offset,
        )
        return list(achievements)
    except SQLAlchemyError as exc:
        raise_http(db, exc)


@router.get("/{achievement_id}", response_model=AchievementRead, summary="Fetch one achievement")
def get_achievement(
    achievement_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> AchievementRead:
    """Visible to the owner and to admins scoped to the owner's department."""

    try:
        achievement = achievement_service.get_achievement(db, achievement_id)
        department_id = department_of_teacher(db, achievement.teacher_id)
        ensure_can_act(
            db,
            actor,
            Operation.VIEW,
            department_id,
            owner_id=achievement.teacher_id,
            record_id=achievement_id,
        )
        return achievement
    except (PortalError, SQLAlchemyError) as exc:
        raise_http(db, exc, record_id=achievement_id)


@router.patch(
    "/{achievement_id}",
    response_model=AchievementRead,
    summary="Edit a pending or rejected achievement",
    responses={
        409: {"description": "Achievement approved or changed concurrently"},
        422: {"description": "Category schema violation"},
    },
)
def edit_achievement(
    achievement_id: UUID,
    payload: AchievementUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> AchievementRead:
    """Edit in place; saving a rejected achievement resubmits it as pending."""

    try:
        achievement = achievement_service.get_achievement(db, achievement_id)
        department_id = department_of_teacher(db, achievement.teacher_id)
        ensure_can_act(
            db,
            actor,
            Operation.EDIT,
            department_id,
            owner_id=achievement.teacher_id,
            record_id=achievement_id,
        )
        achievement = achievement_service.update_achievement(
            db,
            achievement_id=achievement_id,
            changes=payload.model_dump(exclude_unset=True),
        )
        commit_or_raise(db)
        db.refresh(achievement)
        return achievement
    except (PortalError, SQLAlchemyError) as exc:
        raise_http(db, exc, record_id=achievement_id)
