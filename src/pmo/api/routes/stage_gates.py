"""Stage-gate API routes: checklist, approvals and stage advancement."""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pmo.analytics import stage_gate
from pmo.api.deps import get_db, get_or_404, verify_api_key
from pmo.models.db import Project, StageGate
from pmo.models.schemas import (
    GateApproval,
    GateRejection,
    ProjectResponse,
    RequirementToggle,
    StageGateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_response(gate: StageGate) -> StageGateResponse:
    response = StageGateResponse.model_validate(gate)
    response.completion_percentage = stage_gate.gate_completion_percentage(gate)
    response.can_approve = stage_gate.can_approve_gate(gate)
    return response


async def _project_gates(session: AsyncSession, project: Project) -> list[StageGate]:
    """A project's gates, created from the standard template on first access."""
    result = await session.execute(
        select(StageGate)
        .where(StageGate.project_id == project.id)
        .order_by(StageGate.position)
    )
    gates = list(result.scalars().all())
    if gates:
        return gates

    gates = [StageGate(project_id=project.id, **g) for g in stage_gate.default_gates()]
    session.add_all(gates)
    await session.flush()
    for gate in gates:
        await session.refresh(gate)
    logger.info("Initialised %d stage gates for project %s", len(gates), project.name)
    return gates


async def _save(session: AsyncSession, gate: StageGate) -> StageGateResponse:
    await session.flush()
    await session.refresh(gate)
    return _to_response(gate)


@router.get("/projects/{project_id}/gates", response_model=list[StageGateResponse])
async def list_gates(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """List a project's stage gates in stage order."""
    project = await get_or_404(session, Project, project_id)
    return [_to_response(g) for g in await _project_gates(session, project)]


@router.post("/gates/{gate_id}/request", response_model=StageGateResponse)
async def request_gate_approval(
    gate_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Mark a gate as awaiting approval."""
    gate = await get_or_404(session, StageGate, gate_id, "Stage gate")
    try:
        stage_gate.request_gate(gate)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return await _save(session, gate)


@router.post("/gates/{gate_id}/approve", response_model=StageGateResponse)
async def approve_gate(
    gate_id: uuid.UUID,
    data: GateApproval,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Approve a gate, conditionally when conditions are given."""
    gate = await get_or_404(session, StageGate, gate_id, "Stage gate")
    try:
        stage_gate.approve_gate(gate, data.approver, data.comments, data.conditions)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return await _save(session, gate)


@router.post("/gates/{gate_id}/reject", response_model=StageGateResponse)
async def reject_gate(
    gate_id: uuid.UUID,
    data: GateRejection,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    gate = await get_or_404(session, StageGate, gate_id, "Stage gate")
    try:
        stage_gate.reject_gate(gate, data.approver, data.comments)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return await _save(session, gate)


@router.patch(
    "/gates/{gate_id}/requirements/{requirement_id}",
    response_model=StageGateResponse,
)
async def toggle_requirement(
    gate_id: uuid.UUID,
    requirement_id: str,
    data: RequirementToggle,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Tick or untick one checklist item on a gate."""
    gate = await get_or_404(session, StageGate, gate_id, "Stage gate")
    try:
        stage_gate.update_requirement(
            gate, requirement_id, data.completed, data.user, data.evidence
        )
    except KeyError:
        raise HTTPException(status_code=404, detail="Requirement not found")
    return await _save(session, gate)


@router.post("/projects/{project_id}/advance-stage", response_model=ProjectResponse)
async def advance_project_stage(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Move the project to its next stage once the current gate has passed."""
    project = await get_or_404(session, Project, project_id)
    gates = await _project_gates(session, project)
    try:
        new_stage = stage_gate.advance_stage(project.current_stage, gates)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))

    logger.info("Project %s advanced from %s to %s", project.name, project.current_stage, new_stage)
    project.current_stage = new_stage
    await session.flush()
    await session.refresh(project)
    return project
