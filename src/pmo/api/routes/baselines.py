"""Baseline and requirement traceability API routes."""

from __future__ import annotations

import logging
import uuid
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pmo.analytics import baseline as baseline_analytics
from pmo.api.deps import get_db, get_or_404, verify_api_key
from pmo.config import settings
from pmo.models.db import Project, ProjectBaseline, Requirement
from pmo.models.schemas import (
    BaselineCreate,
    BaselineResponse,
    RequirementCreate,
    RequirementResponse,
)
from pmo.reports import baseline_report
from pmo.services.portfolio import project_tasks

logger = logging.getLogger(__name__)

router = APIRouter()


async def _project_baseline(
    session: AsyncSession, project_id: uuid.UUID, baseline_id: uuid.UUID
) -> ProjectBaseline:
    baseline = await get_or_404(session, ProjectBaseline, baseline_id, "Baseline")
    if baseline.project_id != project_id:
        raise HTTPException(status_code=404, detail="Baseline not found")
    return baseline


@router.post(
    "/projects/{project_id}/baselines",
    response_model=BaselineResponse,
    status_code=201,
)
async def create_baseline(
    project_id: uuid.UUID,
    data: BaselineCreate,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Freeze the project's current schedule, budget and tasks."""
    project = await get_or_404(session, Project, project_id)
    tasks = await project_tasks(session, project_id)

    baseline = ProjectBaseline(
        project_id=project_id,
        name=data.name,
        description=data.description,
        created_by=data.created_by,
        snapshot=baseline_analytics.snapshot_project(project, tasks),
    )
    session.add(baseline)
    await session.flush()

    if data.activate:
        project.active_baseline_id = baseline.id
        await session.flush()

    await session.refresh(baseline)
    logger.info(
        "Baseline '%s' captured for project %s (%d tasks)",
        baseline.name,
        project.name,
        len(tasks),
    )
    return baseline


@router.get("/projects/{project_id}/baselines", response_model=list[BaselineResponse])
async def list_baselines(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """List a project's baselines, oldest first."""
    result = await session.execute(
        select(ProjectBaseline)
        .where(ProjectBaseline.project_id == project_id)
        .order_by(ProjectBaseline.created_at)
    )
    return result.scalars().all()


@router.post("/projects/{project_id}/baselines/{baseline_id}/activate")
async def activate_baseline(
    project_id: uuid.UUID,
    baseline_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Make a baseline the one scope creep is measured against."""
    project = await get_or_404(session, Project, project_id)
    baseline = await _project_baseline(session, project_id, baseline_id)
    project.active_baseline_id = baseline.id
    await session.flush()
    return {"project_id": str(project.id), "active_baseline_id": str(baseline.id)}


@router.get("/projects/{project_id}/baselines/trend")
async def get_baseline_trend(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Task count and effort trend across baselines up to the live project."""
    project = await get_or_404(session, Project, project_id)
    tasks = await project_tasks(session, project_id)
    baselines = (
        await session.execute(
            select(ProjectBaseline).where(ProjectBaseline.project_id == project_id)
        )
    ).scalars().all()
    return baseline_analytics.analyze_baseline_trend(
        project, tasks, baselines, hours_per_day=settings.hours_per_day
    )


@router.get("/projects/{project_id}/baselines/{baseline_id}/compare")
async def compare_baseline(
    project_id: uuid.UUID,
    baseline_id: uuid.UUID,
    format: Literal["json", "markdown"] = "json",
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Compare the live project with a baseline, as JSON or a Markdown report."""
    project = await get_or_404(session, Project, project_id)
    baseline = await _project_baseline(session, project_id, baseline_id)
    tasks = await project_tasks(session, project_id)

    comparison = baseline_analytics.compare_with_baseline(
        project, tasks, baseline, hours_per_day=settings.hours_per_day
    )
    if format == "markdown":
        return PlainTextResponse(baseline_report(comparison), media_type="text/markdown")
    return comparison


# ── Requirements ──────────────────────────────────────────────────────────────


@router.post("/requirements", response_model=RequirementResponse, status_code=201)
async def create_requirement(
    data: RequirementCreate,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Record a requirement and the tasks that implement it."""
    await get_or_404(session, Project, data.project_id)

    requirement = Requirement(**data.model_dump())
    session.add(requirement)
    await session.flush()
    await session.refresh(requirement)
    return requirement


@router.get("/requirements", response_model=list[RequirementResponse])
async def list_requirements(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    result = await session.execute(
        select(Requirement).where(Requirement.project_id == project_id)
    )
    return result.scalars().all()


@router.delete("/requirements/{requirement_id}", status_code=204)
async def delete_requirement(
    requirement_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    requirement = await get_or_404(session, Requirement, requirement_id)
    await session.delete(requirement)
    await session.flush()
