"""Teacher profile, points and target-status endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...core.database import commit_or_raise, get_db
from ...core.errors import PortalError
from ...schemas import PointsSummary, TargetEvaluationRead, TeacherCreate, TeacherRead
from ...services import points_service, target_service, teacher_service
from ...services.authorization_service import Actor, ActorRole, ensure_can_access_teacher
from ..deps import get_current_actor, raise_http, require_role

router = APIRouter(prefix="/teachers", tags=["teachers"])


@router.post(
    "",
    response_model=TeacherRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create my teacher profile",
    responses={409: {"description": "Profile or email already registered"}},
)
def register(
    payload: TeacherCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> TeacherRead:
    """Department membership is fixed here and scopes every later review."""

    require_role(actor, ActorRole.TEACHER)
    try:
        teacher = teacher_service.register_teacher(
            db,
            teacher_id=actor.actor_id,
            full_name=payload.full_name,
            email=payload.email,
            department_id=payload.department_id,
            designation=payload.designation,
        )
        commit_or_raise(db)
        db.refresh(teacher)
        return teacher
    except (PortalError, SQLAlchemyError) as exc:
        raise_http(db, exc)


@router.get("/{teacher_id}", response_model=TeacherRead, summary="Teacher profile")
def get_teacher(
    teacher_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> TeacherRead:
    try:
        teacher = teacher_service.ensure_teacher(db, teacher_id)
        ensure_can_access_teacher(db, actor, teacher)
        return teacher
    except (PortalError, SQLAlchemyError) as exc:
        raise_http(db, exc, record_id=teacher_id)


@router.get("/{teacher_id}/points", response_model=PointsSummary, summary="Balance and ledger history")
def get_points(
    teacher_id: UUID,
    *,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> PointsSummary:
    try:
        teacher = teacher_service.ensure_teacher(db, teacher_id)
        ensure_can_access_teacher(db, actor, teacher)
        history = points_service.list_history(db, teacher_id=teacher_id, limit=limit, offset=offset)
        return PointsSummary(
            teacher_id=teacher_id,
            current_points=points_service.get_balance(db, teacher_id),
            history=list(history),
        )
    except (PortalError, SQLAlchemyError) as exc:
        raise_http(db, exc, record_id=teacher_id)


@router.get(
    "/{teacher_id}/target-status",
    response_model=TargetEvaluationRead,
    summary="Standing against the department target",
    responses={
        200: {
            "description": "Evaluation of the active target",
            "content": {
                "application/json": {
                    "example": {
                        "teacher_id": "aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa",
                        "department_id": "cse-2nd-year",
                        "current_points": 45,
                        "status": "IN_PROGRESS",
                        "target_points": 120,
                        "target_date": "2026-03-31",
                        "benefits": ["Conference travel grant"],
                    }
                }
            },
        }
    },
)
def get_target_status(
    teacher_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> TargetEvaluationRead:
    try:
        teacher = teacher_service.ensure_teacher(db, teacher_id)
        ensure_can_access_teacher(db, actor, teacher)
        evaluation = target_service.evaluate(db, teacher_id)
        return TargetEvaluationRead.model_validate(evaluation)
    except (PortalError, SQLAlchemyError) as exc:
        raise_http(db, exc, record_id=teacher_id)
