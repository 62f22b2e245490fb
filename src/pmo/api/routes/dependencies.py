"""Cross-project dependency API routes."""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pmo.analytics import dependencies as dependency_analytics
from pmo.api.deps import get_db, get_or_404, verify_api_key
from pmo.models.db import Project, ProjectDependency
from pmo.models.schemas import (
    CriticalPathResponse,
    DependencyCreate,
    DependencyImpact,
    DependencyResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def _all_dependencies(session: AsyncSession) -> list[ProjectDependency]:
    return list((await session.execute(select(ProjectDependency))).scalars().all())


async def _all_projects(session: AsyncSession) -> list[Project]:
    return list((await session.execute(select(Project))).scalars().all())


@router.post("/dependencies", response_model=DependencyResponse, status_code=201)
async def create_dependency(
    data: DependencyCreate,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Declare that one project depends on another."""
    if data.from_project_id == data.to_project_id:
        raise HTTPException(status_code=400, detail="A project cannot depend on itself")
    await get_or_404(session, Project, data.from_project_id)
    await get_or_404(session, Project, data.to_project_id)

    dependency = ProjectDependency(**data.model_dump())
    session.add(dependency)
    await session.flush()
    await session.refresh(dependency)

    cycles = dependency_analytics.detect_circular_dependencies(
        await _all_dependencies(session)
    )
    if cycles:
        logger.warning("Dependency %s closes a cycle: %s", dependency.id, cycles[0])
    return dependency


@router.get("/dependencies", response_model=list[DependencyResponse])
async def list_dependencies(
    project_id: uuid.UUID | None = None,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """List dependencies, optionally those touching one project."""
    query = select(ProjectDependency)
    if project_id:
        query = query.where(
            (ProjectDependency.from_project_id == project_id)
            | (ProjectDependency.to_project_id == project_id)
        )
    result = await session.execute(query)
    return result.scalars().all()


@router.get("/dependencies/cycles", response_model=list[list[str]])
async def get_cycles(
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Every dependency cycle, as lists of project ids."""
    return dependency_analytics.detect_circular_dependencies(
        await _all_dependencies(session)
    )


@router.get("/dependencies/critical-path", response_model=CriticalPathResponse)
async def get_critical_path(
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    return dependency_analytics.calculate_critical_path(
        await _all_dependencies(session), await _all_projects(session)
    )


@router.get("/dependencies/impact/{project_id}", response_model=list[DependencyImpact])
async def get_delay_impact(
    project_id: uuid.UUID,
    delay_days: int = Query(..., ge=0),
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Projects blocked by a delay, each with a suspend-or-wait verdict."""
    await get_or_404(session, Project, project_id)

    impacts = dependency_analytics.analyze_dependency_impact(
        project_id,
        delay_days,
        await _all_projects(session),
        await _all_dependencies(session),
    )
    return [
        DependencyImpact(
            **impact, **dependency_analytics.circuit_breaker_recommendation(impact)
        )
        for impact in impacts
    ]


@router.delete("/dependencies/{dependency_id}", status_code=204)
async def delete_dependency(
    dependency_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    dependency = await get_or_404(session, ProjectDependency, dependency_id, "Dependency")
    await session.delete(dependency)
    await session.flush()
