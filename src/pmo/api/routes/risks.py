"""Risk register API routes: CRUD, heatmap, summary and mitigations."""

from __future__ import annotations

import logging
import uuid
from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pmo.analytics import risk as risk_analytics
from pmo.api.deps import get_db, get_or_404, verify_api_key
from pmo.config import settings
from pmo.models.db import Project, Risk
from pmo.models.schemas import (
    MitigationActionCreate,
    RiskCreate,
    RiskHeatmapResponse,
    RiskResponse,
    RiskSummaryResponse,
    RiskUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def _project_risks(session: AsyncSession, project_id: uuid.UUID) -> list[Risk]:
    result = await session.execute(
        select(Risk).where(Risk.project_id == project_id).order_by(Risk.risk_score.desc())
    )
    return list(result.scalars().all())


@router.post("/risks", response_model=RiskResponse, status_code=201)
async def create_risk(
    data: RiskCreate,
    user: str = "system",
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Register a risk; score and priority are derived from P x I."""
    await get_or_404(session, Project, data.project_id)

    values = data.model_dump()
    values["identified_date"] = values["identified_date"] or date.today()
    risk = Risk(
        **values,
        **risk_analytics.score_fields(data.probability, data.impact),
        mitigation_actions=[],
        history=[risk_analytics.creation_entry(data.title, user)],
    )
    session.add(risk)
    await session.flush()
    await session.refresh(risk)

    logger.info("Risk '%s' registered with score %d", risk.title, risk.risk_score)
    return risk


@router.get("/risks", response_model=list[RiskResponse])
async def list_risks(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """List a project's risks, highest score first."""
    return await _project_risks(session, project_id)


@router.get("/risks/heatmap", response_model=RiskHeatmapResponse)
async def get_risk_heatmap(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """5x5 probability/impact matrix of a project's risks."""
    await get_or_404(session, Project, project_id)
    risks = await _project_risks(session, project_id)
    heatmap = risk_analytics.build_heatmap(risks, settings.high_risk_threshold)
    return RiskHeatmapResponse(project_id=project_id, **heatmap)


@router.get("/risks/summary", response_model=RiskSummaryResponse)
async def get_risk_summary(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    await get_or_404(session, Project, project_id)
    risks = await _project_risks(session, project_id)
    return RiskSummaryResponse(project_id=project_id, **risk_analytics.summarize(risks))


@router.get("/risks/{risk_id}", response_model=RiskResponse)
async def get_risk(
    risk_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Get a risk by ID."""
    return await get_or_404(session, Risk, risk_id)


@router.patch("/risks/{risk_id}", response_model=RiskResponse)
async def update_risk(
    risk_id: uuid.UUID,
    data: RiskUpdate,
    user: str = "system",
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Update a risk, re-scoring it and recording tracked field changes."""
    risk = await get_or_404(session, Risk, risk_id)

    updates = data.model_dump(exclude_unset=True)
    entries = risk_analytics.track_changes(risk, updates, user)
    for key, value in updates.items():
        setattr(risk, key, value)

    if "probability" in updates or "impact" in updates:
        for key, value in risk_analytics.score_fields(risk.probability, risk.impact).items():
            setattr(risk, key, value)
    if updates.get("status") == "resolved" and risk.resolved_date is None:
        risk.resolved_date = date.today()
    if entries:
        risk.history = [*(risk.history or []), *entries]

    await session.flush()
    await session.refresh(risk)
    return risk


@router.post("/risks/{risk_id}/mitigations", response_model=RiskResponse, status_code=201)
async def add_mitigation_action(
    risk_id: uuid.UUID,
    data: MitigationActionCreate,
    user: str = "system",
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Append a mitigation action to a risk."""
    risk = await get_or_404(session, Risk, risk_id)

    action = {"id": str(uuid.uuid4()), **data.model_dump(mode="json")}
    risk.mitigation_actions = [*(risk.mitigation_actions or []), action]
    risk.history = [
        *(risk.history or []),
        risk_analytics.mitigation_entry(data.description, user),
    ]

    await session.flush()
    await session.refresh(risk)
    return risk


@router.delete("/risks/{risk_id}", status_code=204)
async def delete_risk(
    risk_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Delete a risk."""
    risk = await get_or_404(session, Risk, risk_id)
    await session.delete(risk)
    await session.flush()
