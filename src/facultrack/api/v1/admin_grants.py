"""Super-admin management of admin grants."""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...core.database import commit_or_raise, get_db
from ...core.errors import PortalError
from ...schemas import AdminGrantCreate, AdminGrantRead
from ...services import admin_service
from ...services.authorization_service import Actor
from ..deps import get_current_actor, raise_http

router = APIRouter(prefix="/admin-grants", tags=["admin-grants"])


@router.post(
    "",
    response_model=AdminGrantRead,
    status_code=status.HTTP_201_CREATED,
    summary="Grant department or super-admin access",
    responses={403: {"description": "Caller is not a super-admin"}, 409: {"description": "Grant exists"}},
)
def create_grant(
    payload: AdminGrantCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> AdminGrantRead:
    try:
        grant = admin_service.grant_access(
            db,
            actor=actor,
            admin_id=payload.admin_id,
            department_id=payload.department_id,
            is_super_admin=payload.is_super_admin,
        )
        commit_or_raise(db)
        db.refresh(grant)
        return grant
    except (PortalError, SQLAlchemyError) as exc:
        raise_http(db, exc)


@router.get("", response_model=List[AdminGrantRead], summary="List grants")
def list_grants(
    admin_id: Optional[UUID] = Query(None, description="Only grants of this admin"),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> List[AdminGrantRead]:
    try:
        return list(admin_service.list_grants(db, actor=actor, admin_id=admin_id))
    except (PortalError, SQLAlchemyError) as exc:
        raise_http(db, exc)


@router.delete("/{grant_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Revoke a grant")
def revoke_grant(
    grant_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Response:
    try:
        admin_service.revoke_access(db, actor=actor, grant_id=grant_id)
        commit_or_raise(db)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except (PortalError, SQLAlchemyError) as exc:
        raise_http(db, exc, record_id=grant_id)
