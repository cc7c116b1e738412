"""Role-scoped authorization.

Department scope is resolved from ``admin_grants`` on every call and the
department of a record is always taken from its owning teacher's current
profile, never from request data.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.errors import ForbiddenError
from ..models import Achievement, AdminGrant, Teacher
from .teacher_service import ensure_teacher


class ActorRole(str, enum.Enum):
    """Role asserted by the identity provider."""

    TEACHER = "TEACHER"
    ADMIN = "ADMIN"


class Operation(str, enum.Enum):
    """Operations subject to authorization."""

    SUBMIT = "SUBMIT"
    EDIT = "EDIT"
    VIEW = "VIEW"
    REVIEW = "REVIEW"
    MANAGE_TARGETS = "MANAGE_TARGETS"


TEACHER_OPERATIONS = frozenset({Operation.SUBMIT, Operation.EDIT, Operation.VIEW})
ADMIN_OPERATIONS = frozenset({Operation.VIEW, Operation.REVIEW, Operation.MANAGE_TARGETS})


@dataclass(frozen=True)
class Actor:
    """Authenticated caller."""

    actor_id: UUID
    role: ActorRole


@dataclass(frozen=True)
class AdminScope:
    """Departments an admin may act on."""

    admin_id: UUID
    is_super_admin: bool = False
    departments: frozenset[str] = field(default_factory=frozenset)

    def covers(self, department_id: Optional[str]) -> bool:
        if self.is_super_admin:
            return True
        return department_id is not None and department_id in self.departments


def resolve_scope(session: Session, actor: Actor) -> AdminScope:
    """Load the actor's grants; non-admins get an empty scope."""

    if actor.role is not ActorRole.ADMIN:
        return AdminScope(admin_id=actor.actor_id)

    grants = session.execute(select(AdminGrant).where(AdminGrant.admin_id == actor.actor_id)).scalars().all()
    return AdminScope(
        admin_id=actor.actor_id,
        is_super_admin=any(grant.is_super_admin for grant in grants),
        departments=frozenset(grant.department_id for grant in grants if grant.department_id),
    )


def can_act(
    session: Session,
    actor: Actor,
    operation: Operation,
    target_department: Optional[str],
    *,
    owner_id: Optional[UUID] = None,
) -> bool:
    """Decide whether ``actor`` may perform ``operation`` in ``target_department``.

    Teachers act only on their own records and never review. Admins act on
    departments covered by their grants; super-admins on every department.
    """

    if actor.role is ActorRole.TEACHER:
        return operation in TEACHER_OPERATIONS and owner_id is not None and owner_id == actor.actor_id

    if operation not in ADMIN_OPERATIONS:
        return False
    return resolve_scope(session, actor).covers(target_department)


def ensure_can_act(
    session: Session,
    actor: Actor,
    operation: Operation,
    target_department: Optional[str],
    *,
    owner_id: Optional[UUID] = None,
    record_id=None,
) -> None:
    if not can_act(session, actor, operation, target_department, owner_id=owner_id):
        raise ForbiddenError(
            f"{actor.role.value.lower()} {actor.actor_id} may not {operation.value.lower()} in this scope.",
            record_id=record_id,
        )


def department_of_teacher(session: Session, teacher_id: UUID) -> str:
    """Return the teacher's department as stored right now."""

    teacher = ensure_teacher(session, teacher_id)
    return teacher.department_id


def ensure_can_access_teacher(session: Session, actor: Actor, teacher: Teacher, operation: Operation = Operation.VIEW) -> None:
    ensure_can_act(
        session,
        actor,
        operation,
        teacher.department_id,
        owner_id=teacher.teacher_id,
        record_id=teacher.teacher_id,
    )


def ensure_can_review(session: Session, actor: Actor, achievement: Achievement) -> str:
    """Authorize a review transition; returns the resolved department."""

    department_id = department_of_teacher(session, achievement.teacher_id)
    ensure_can_act(
        session,
        actor,
        Operation.REVIEW,
        department_id,
        record_id=achievement.achievement_id,
    )
    return department_id


def ensure_super_admin(session: Session, actor: Actor) -> AdminScope:
    scope = resolve_scope(session, actor)
    if not scope.is_super_admin:
        raise ForbiddenError("Only super-admins may manage admin access.")
    return scope
