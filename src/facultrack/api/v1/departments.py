"""Department-scoped admin endpoints: review queues and targets."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...core.database import commit_or_raise, get_db
from ...core.errors import PortalError
from ...models import AchievementStatus
from ...schemas import AchievementRead, DepartmentRead, TargetCreate, TargetRead
from ...services import achievement_service, department_service, target_service
from ...services.authorization_service import Actor, Operation, ensure_can_act
from ..deps import get_current_actor, raise_http

router = APIRouter(prefix="/departments", tags=["departments"])


@router.get("", response_model=List[DepartmentRead], summary="Department catalog")
def list_departments(db: Session = Depends(get_db)) -> List[DepartmentRead]:
    try:
        return list(department_service.list_departments(db))
    except SQLAlchemyError as exc:
        raise_http(db, exc)


@router.get(
    "/{department_id}/achievements",
    response_model=List[AchievementRead],
    summary="Achievements of a department",
    responses={403: {"description": "Department outside the admin's grants"}},
)
def list_department_achievements(
    department_id: str,
    *,
    status_filter: Optional[AchievementStatus] = Query(None, alias="status", description="Filter by review status"),
    limit: int = Query(50, ge=1, le=100, description="Maximum items to return"),
    offset: int = Query(0, ge=0, description="Items to skip for pagination"),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> List[AchievementRead]:
    """Review queue for admins scoped to ``department_id``."""

    try:
        department_service.ensure_department(db, department_id)
        ensure_can_act(db, actor, Operation.VIEW, department_id, record_id=department_id)
        achievements = achievement_service.list_by_department(
            db,
            department_id=department_id,
            status=status_filter,
            limit=limit,
            offset=offset,
        )
        return list(achievements)
    except (PortalError, SQLAlchemyError) as exc:
        raise_http(db, exc, record_id=department_id)


@router.post(
    "/{department_id}/targets",
    response_model=TargetRead,
    status_code=status.HTTP_201_CREATED,
    summary="Set a new department target",
    responses={
        201: {
            "description": "Target created; it supersedes earlier ones",
            "content": {
                "application/json": {
                    "example": {
                        "target_id": "77777777-7777-7777-7777-777777777777",
                        "department_id": "cse-2nd-year",
                        "target_points": 120,
                        "target_date": "2026-03-31",
                        "benefits": ["Conference travel grant", "Research allowance"],
                        "created_by": "dddddddd-dddd-dddd-dddd-dddddddddddd",
                        "created_at": "2025-11-12T09:00:00",
                    }
                }
            },
        },
        403: {"description": "Department outside the admin's grants"},
    },
)
def create_target(
    department_id: str,
    payload: TargetCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> TargetRead:
    try:
        target = target_service.create_target(
            db,
            actor=actor,
            department_id=department_id,
            target_points=payload.target_points,
            target_date=payload.target_date,
            benefits=payload.benefits,
        )
        commit_or_raise(db)
        db.refresh(target)
        return target
    except (PortalError, SQLAlchemyError) as exc:
        raise_http(db, exc, record_id=department_id)


@router.get("/{department_id}/targets", response_model=List[TargetRead], summary="Target history, newest first")
def list_targets(
    department_id: str,
    *,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> List[TargetRead]:
    try:
        department_service.ensure_department(db, department_id)
        ensure_can_act(db, actor, Operation.VIEW, department_id, record_id=department_id)
        return list(target_service.list_targets(db, department_id=department_id, limit=limit, offset=offset))
    except (PortalError, SQLAlchemyError) as exc:
        raise_http(db, exc, record_id=department_id)
