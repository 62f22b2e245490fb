"""Project health analytics routes: EVM, cost forecast, scope creep and ghost tasks."""

from __future__ import annotations

import logging
import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pmo.analytics import calculate_evm, detect_ghost_tasks, forecast_cost
from pmo.api.deps import get_db, get_or_404, verify_api_key
from pmo.config import settings
from pmo.models.db import Project, Requirement
from pmo.models.schemas import EVMResponse, GhostTask, ScopeCreepResponse
from pmo.services.portfolio import project_tasks, scope_metrics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pmo")


@router.get("/evm/{project_id}", response_model=EVMResponse)
async def get_evm(
    project_id: uuid.UUID,
    as_of: date | None = None,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Earned value metrics for a project as of a status date (default today)."""
    project = await get_or_404(session, Project, project_id)
    tasks = await project_tasks(session, project_id)
    return calculate_evm(project, tasks, as_of)


@router.get("/cost-forecast/{project_id}")
async def get_cost_forecast(
    project_id: uuid.UUID,
    months: int = Query(6, ge=1, le=36),
    as_of: date | None = None,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Month-by-month actual cost projected towards EAC."""
    project = await get_or_404(session, Project, project_id)
    tasks = await project_tasks(session, project_id)
    metrics = calculate_evm(project, tasks, as_of)
    try:
        points = forecast_cost(metrics, months=months)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"project_id": str(project_id), "eac": metrics["eac"], "points": points}


@router.get("/scope-metrics/{project_id}", response_model=ScopeCreepResponse)
async def get_scope_metrics(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Effort growth against the active baseline, with a warning when over threshold."""
    project = await get_or_404(session, Project, project_id)
    metrics = await scope_metrics(session, project)
    if metrics["is_over_threshold"]:
        logger.warning(
            "Project %s scope creep at %.1f%%", project.name, metrics["creep_percentage"]
        )
    return metrics


@router.get("/ghost-tasks/{project_id}", response_model=list[GhostTask])
async def get_ghost_tasks(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Tasks that no requirement traces to."""
    await get_or_404(session, Project, project_id)
    tasks = await project_tasks(session, project_id)
    requirements = (
        await session.execute(select(Requirement).where(Requirement.project_id == project_id))
    ).scalars().all()
    return detect_ghost_tasks(tasks, requirements, settings.hours_per_day)
