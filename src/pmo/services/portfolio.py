"""Database-backed portfolio operations shared by routes and background jobs."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pmo.analytics import scoring
from pmo.analytics.baseline import snapshot_tasks
from pmo.analytics.scope import calculate_scope_creep
from pmo.config import settings
from pmo.models.db import (
    ChangeRequest,
    FactorDefinition,
    Project,
    ProjectBaseline,
    Task,
)
from pmo.reports import scope_creep_warning

logger = logging.getLogger(__name__)


async def sync_scores_and_ranks(session: AsyncSession) -> list[Project]:
    """Re-score every project from its factors and re-rank the portfolio."""
    projects = (await session.execute(select(Project))).scalars().all()
    definitions = (await session.execute(select(FactorDefinition))).scalars().all()

    ranked = scoring.rescore_portfolio(projects, definitions)
    await session.flush()
    return ranked


async def project_tasks(session: AsyncSession, project_id: Any) -> list[Task]:
    result = await session.execute(
        select(Task).where(Task.project_id == project_id).order_by(Task.start_date)
    )
    return list(result.scalars().all())


async def active_baseline_tasks(session: AsyncSession, project: Project) -> list | None:
    """Tasks frozen in the project's active baseline, if it has one."""
    if project.active_baseline_id is None:
        return None
    result = await session.execute(
        select(ProjectBaseline).where(ProjectBaseline.id == project.active_baseline_id)
    )
    baseline = result.scalar_one_or_none()
    if baseline is None:
        logger.warning(
            "Project %s points at missing baseline %s",
            project.id,
            project.active_baseline_id,
        )
        return None
    return snapshot_tasks(baseline.snapshot)


async def scope_metrics(session: AsyncSession, project: Project) -> dict[str, Any]:
    """Scope-creep metrics for a project, with the rendered warning attached."""
    tasks = await project_tasks(session, project.id)
    crs = (
        await session.execute(
            select(ChangeRequest).where(ChangeRequest.project_id == project.id)
        )
    ).scalars().all()
    baseline = await active_baseline_tasks(session, project)

    metrics = calculate_scope_creep(
        project,
        tasks,
        crs,
        baseline_tasks=baseline,
        threshold=settings.scope_creep_threshold,
        hours_per_day=settings.hours_per_day,
    )
    metrics["warning"] = scope_creep_warning(metrics)
    return metrics
