"""Entry point for the external retention-sweep trigger."""

from __future__ import annotations

import hmac
from typing import Optional

from fastapi import APIRouter, Depends, Header
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...core.config import get_settings
from ...core.database import commit_or_raise, get_db
from ...core.errors import ForbiddenError, PortalError
from ...schemas import SweepSummary
from ...services.retention_service import run_retention_sweep
from ..deps import raise_http

router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@router.post(
    "/retention-sweep",
    response_model=SweepSummary,
    summary="Purge rejected achievements past retention",
    responses={403: {"description": "Missing or wrong scheduler token"}},
)
def retention_sweep(
    x_scheduler_token: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> SweepSummary:
    """Called daily by the external scheduler."""

    try:
        expected = get_settings().scheduler_token
        if not expected or not x_scheduler_token or not hmac.compare_digest(expected, x_scheduler_token):
            raise ForbiddenError("Scheduler token rejected.")
        summary = run_retention_sweep(db)
        commit_or_raise(db)
        return SweepSummary(**summary)
    except (PortalError, SQLAlchemyError) as exc:
        raise_http(db, exc)
