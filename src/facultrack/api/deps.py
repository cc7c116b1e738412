"""Request-scoped dependencies shared by the v1 routers."""

from __future__ import annotations

from typing import Any, NoReturn, Union
from uuid import UUID

from fastapi import Header, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.database import store_error
from ..core.errors import PortalError
from ..services.authorization_service import Actor, ActorRole
from ..services.notification_service import NotificationDispatcher, get_dispatcher


def get_current_actor(
    x_actor_id: UUID = Header(..., description="Subject id asserted by the identity provider"),
    x_actor_role: ActorRole = Header(..., description="Role asserted by the identity provider"),
) -> Actor:
    """Build the actor from the identity provider's assertion.

    Only identity and role are taken from the request; department scope is
    always resolved server-side.
    """

    return Actor(actor_id=x_actor_id, role=x_actor_role)


def get_notification_dispatcher() -> NotificationDispatcher:
    return get_dispatcher()


def raise_http(db: Session, exc: Union[PortalError, SQLAlchemyError], *, record_id: Any = None) -> NoReturn:
    """Roll back the unit of work and surface ``exc`` as an HTTP error.

    Store failures raised mid-operation become ``ConflictError`` or
    ``DependencyError`` first.
    """

    db.rollback()
    error = store_error(exc, record_id=record_id) if isinstance(exc, SQLAlchemyError) else exc
    raise HTTPException(status_code=error.status_code, detail=error.to_detail()) from exc


def require_role(actor: Actor, role: ActorRole) -> None:
    if actor.role is not role:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "forbidden", "message": f"Only {role.value.lower()}s may do this."},
        )
