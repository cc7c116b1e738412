"""Daily trigger for the rejected-achievement retention sweep."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI

from ..core.config import get_settings
from ..core.database import SessionLocal
from ..services.retention_service import run_retention_sweep

logger = logging.getLogger(__name__)

_scheduler = AsyncIOScheduler(timezone="UTC")


async def _execute_retention_sweep() -> None:
    session = SessionLocal()
    try:
        summary = run_retention_sweep(session, current_time=datetime.now(timezone.utc))
        session.commit()
        logger.info("retention sweep completed: %s", summary)
    except Exception:  # pragma: no cover - safeguard for background job
        session.rollback()
        logger.exception("retention sweep job failed")
        raise
    finally:
        session.close()


def register_scheduler(app: FastAPI) -> None:
    """Attach APScheduler lifecycle hooks to the FastAPI app."""

    settings = get_settings()
    if not settings.scheduler_enabled:
        logger.info("retention sweep scheduler disabled; relying on external trigger")
        return

    if _scheduler.get_job("retention_sweep") is None:
        _scheduler.add_job(
            _execute_retention_sweep,
            "cron",
            hour=settings.retention_sweep_hour,
            minute=settings.retention_sweep_minute,
            id="retention_sweep",
            misfire_grace_time=3600,
            coalesce=True,
            max_instances=1,
        )

    @app.on_event("startup")
    async def start_scheduler() -> None:
        if not _scheduler.running:
            _scheduler.start()
            logger.info("retention sweep scheduler started")

    @app.on_event("shutdown")
    async def shutdown_scheduler() -> None:
        if _scheduler.running:
            _scheduler.shutdown(wait=False)
            logger.info("retention sweep scheduler stopped")


def run_sweep_once(current_time: datetime | None = None) -> dict[str, int]:
    """Run the sweep synchronously, for cron wrappers and manual runs."""

    session = SessionLocal()
    try:
        summary = run_retention_sweep(session, current_time=current_time)
        session.commit()
        return summary
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
