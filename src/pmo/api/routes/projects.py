"""Project CRUD, scoring factor and portfolio ranking API routes."""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pmo.api.deps import check_dates, get_db, get_or_404, verify_api_key
from pmo.models.db import FactorDefinition, Project, ProjectDependency
from pmo.models.schemas import (
    FactorDefinitionCreate,
    FactorDefinitionResponse,
    ProjectCreate,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdate,
)
from pmo.services.portfolio import sync_scores_and_ranks

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/projects", response_model=ProjectResponse, status_code=201)
async def create_project(
    data: ProjectCreate,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Create a project and re-rank the portfolio."""
    check_dates(data.start_date, data.end_date)

    project = Project(**data.model_dump())
    session.add(project)
    await session.flush()

    await sync_scores_and_ranks(session)
    await session.refresh(project)
    logger.info("Created project %s (rank %s)", project.name, project.rank)
    return project


@router.get("/projects", response_model=ProjectListResponse)
async def list_projects(
    skip: int = 0,
    limit: int = 50,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """List projects, highest score first."""
    result = await session.execute(
        select(Project)
        .order_by(Project.score.desc().nulls_last(), Project.created_at.desc())
        .offset(skip)
        .limit(limit)
    )
    projects = result.scalars().all()

    total = (await session.execute(select(func.count()).select_from(Project))).scalar_one()

    return ProjectListResponse(projects=projects, total=total)


@router.get("/projects/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Get a project by ID."""
    return await get_or_404(session, Project, project_id)


@router.patch("/projects/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: uuid.UUID,
    data: ProjectUpdate,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Update a project; new factor scores re-rank the portfolio."""
    project = await get_or_404(session, Project, project_id)

    update_data = data.model_dump(exclude_unset=True)
    check_dates(
        update_data.get("start_date", project.start_date),
        update_data.get("end_date", project.end_date),
    )
    for key, value in update_data.items():
        setattr(project, key, value)
    await session.flush()

    if "factors" in update_data:
        await sync_scores_and_ranks(session)

    await session.refresh(project)
    return project


@router.delete("/projects/{project_id}", status_code=204)
async def delete_project(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Delete a project and everything it owns."""
    project = await get_or_404(session, Project, project_id)
    await session.execute(
        delete(ProjectDependency).where(
            (ProjectDependency.from_project_id == project_id)
            | (ProjectDependency.to_project_id == project_id)
        )
    )
    await session.delete(project)
    await session.flush()


# ── Portfolio scoring ─────────────────────────────────────────────────────────


@router.post("/pmo/sync")
async def sync_portfolio(
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Recompute every project's score and rank."""
    ranked = await sync_scores_and_ranks(session)
    return {
        "message": "Portfolio scores and ranks synced",
        "ranking": [
            {"project_id": str(p.id), "name": p.name, "score": p.score, "rank": p.rank}
            for p in ranked
        ],
    }


@router.post("/factors", response_model=FactorDefinitionResponse, status_code=201)
async def create_factor(
    data: FactorDefinitionCreate,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Define a new scoring factor."""
    factor = FactorDefinition(**data.model_dump())
    session.add(factor)
    await session.flush()
    await session.refresh(factor)
    return factor


@router.get("/factors", response_model=list[FactorDefinitionResponse])
async def list_factors(
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    result = await session.execute(select(FactorDefinition).order_by(FactorDefinition.name))
    return result.scalars().all()


@router.delete("/factors/{factor_id}", status_code=204)
async def delete_factor(
    factor_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Remove a scoring factor and re-rank without it."""
    factor = await get_or_404(session, FactorDefinition, factor_id, "Factor")
    await session.delete(factor)
    await session.flush()
    await sync_scores_and_ranks(session)
