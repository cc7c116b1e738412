"""Admin grant management."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.errors import ConflictError, NotFoundError, ValidationError
from ..models import AdminGrant
from ..utils.datetime import utc_now
from .authorization_service import Actor, ensure_super_admin
from .department_service import ensure_department

logger = logging.getLogger(__name__)


def grant_access(
    session: Session,
    *,
    actor: Optional[Actor],
    admin_id: UUID,
    department_id: Optional[str] = None,
    is_super_admin: bool = False,
    current_time: datetime | None = None,
) -> AdminGrant:
    """Grant the super-admin flag or access to one department.

    ``actor=None`` is reserved for bootstrap scripts creating the first super-admin.
    """

    if actor is not None:
        ensure_super_admin(session, actor)

    if is_super_admin == (department_id is not None):
        raise ValidationError(
            "department_id",
            "A grant names exactly one department or sets the super-admin flag.",
        )

    stmt = select(AdminGrant).where(AdminGrant.admin_id == admin_id)
    if is_super_admin:
        stmt = stmt.where(AdminGrant.is_super_admin.is_(True))
    else:
        ensure_department(session, department_id)
        stmt = stmt.where(AdminGrant.department_id == department_id)
    if session.execute(stmt).scalar_one_or_none() is not None:
        raise ConflictError("Admin already holds this grant.")

    grant = AdminGrant(
        admin_id=admin_id,
        department_id=department_id,
        is_super_admin=is_super_admin,
        granted_by=actor.actor_id if actor else None,
        created_at=utc_now(current_time),
    )
    session.add(grant)
    session.flush()
    logger.info(
        "granted %s to admin %s",
        "super-admin" if is_super_admin else f"department {department_id}",
        admin_id,
    )
    return grant


def revoke_access(session: Session, *, actor: Actor, grant_id: UUID) -> None:
    ensure_super_admin(session, actor)
    grant = session.get(AdminGrant, grant_id)
    if grant is None:
        raise NotFoundError(f"Grant {grant_id} not found", record_id=grant_id)
    session.delete(grant)
    session.flush()
    logger.info("revoked grant %s from admin %s", grant_id, grant.admin_id)


def list_grants(session: Session, *, actor: Actor, admin_id: Optional[UUID] = None) -> Sequence[AdminGrant]:
    ensure_super_admin(session, actor)
    stmt = select(AdminGrant).order_by(AdminGrant.created_at.asc())
    if admin_id:
        stmt = stmt.where(AdminGrant.admin_id == admin_id)
    return session.execute(stmt).scalars().all()
