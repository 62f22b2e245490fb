"""Background workers using APScheduler.

Runs periodic tasks:
- Portfolio score and rank sync (daily)
- Scope-creep check for active projects (every few hours)
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy import select

from pmo.config import settings

logger = logging.getLogger(__name__)

_scheduler: AsyncIOScheduler | None = None


def start_scheduler() -> None:
    """Start the background task scheduler."""
    global _scheduler
    if _scheduler is not None:
        return

    _scheduler = AsyncIOScheduler()

    _scheduler.add_job(
        run_score_sync,
        "cron",
        hour=settings.score_sync_hour,
        minute=0,
        id="score_sync_daily",
        replace_existing=True,
    )

    _scheduler.add_job(
        run_scope_check,
        "interval",
        hours=settings.scope_check_interval_hours,
        id="scope_creep_check",
        replace_existing=True,
    )

    _scheduler.start()
    logger.info("Background scheduler started")


def stop_scheduler() -> None:
    """Stop the background task scheduler."""
    global _scheduler
    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        logger.info("Background scheduler stopped")


async def run_score_sync() -> None:
    """Recompute every project's weighted score and portfolio rank."""
    from pmo.db.session import session_scope
    from pmo.services.portfolio import sync_scores_and_ranks

    logger.info("Starting scheduled portfolio score sync")

    try:
        async with session_scope() as session:
            ranked = await sync_scores_and_ranks(session)
    except Exception:
        logger.exception("Score sync failed")
        return
    logger.info("Score sync completed for %d projects", len(ranked))


async def run_scope_check() -> None:
    """Log a warning for every active project over its scope-creep threshold."""
    from pmo.db.session import session_scope
    from pmo.models.db import Project
    from pmo.services.portfolio import scope_metrics

    logger.info("Starting scheduled scope-creep check")

    async with session_scope() as session:
        result = await session.execute(select(Project).where(Project.status == "active"))
        projects = result.scalars().all()

        flagged = 0
        for project in projects:
            name = project.name
            try:
                # Savepoint per project; a failure rolls back only its own work
                async with session.begin_nested():
                    metrics = await scope_metrics(session, project)
            except Exception:
                logger.exception("Scope check failed for project %s", name)
                continue
            if metrics["is_over_threshold"]:
                flagged += 1
                logger.warning(
                    "Project %s is %.1f%% over its baseline effort",
                    name,
                    metrics["creep_percentage"],
                )

        logger.info("Scope check done: %d of %d projects over threshold", flagged, len(projects))
