"""Purge of old rejected achievements."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from ..core.config import get_settings
from ..models import AchievementStatus
from ..utils.datetime import retention_cutoff
from . import achievement_service

logger = logging.getLogger(__name__)


def run_retention_sweep(
    session: Session,
    *,
    current_time: datetime | None = None,
    retention_days: int | None = None,
) -> dict[str, int]:
    """Hard-delete Rejected achievements created before the retention window.

    Each delete re-checks the status, so a record reset to Pending between
    selection and deletion survives. Returns summary statistics useful for
    logging/testing.
    """

    days = retention_days if retention_days is not None else get_settings().retention_days
    cutoff = retention_cutoff(current_time, days)

    candidates = achievement_service.ids_matching(
        session,
        status=AchievementStatus.REJECTED,
        created_before=cutoff,
    )
    deleted = 0
    for achievement_id in candidates:
        if achievement_service.delete_achievement(session, achievement_id, expected_status=AchievementStatus.REJECTED):
            deleted += 1
        else:
            logger.info("achievement %s left rejected state before purge; skipped", achievement_id)

    summary = {"candidates": len(candidates), "deleted": deleted}
    logger.info("retention sweep (cutoff %s): %s", cutoff.isoformat(), summary)
    return summary
