"""Change request API routes: submission, validation and decisions."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pmo.analytics.scope import validate_change_request
from pmo.api.deps import get_db, get_or_404, verify_api_key
from pmo.models.db import ChangeRequest, Project
from pmo.models.schemas import (
    ChangeRequestCreate,
    ChangeRequestDecision,
    ChangeRequestResponse,
    ValidationResult,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def _pending_request(session: AsyncSession, cr_id: uuid.UUID) -> ChangeRequest:
    cr = await get_or_404(session, ChangeRequest, cr_id, "Change request")
    if cr.status != "pending":
        raise HTTPException(
            status_code=409, detail=f"Change request is already {cr.status}"
        )
    return cr


@router.post("/change-requests", response_model=ChangeRequestResponse, status_code=201)
async def create_change_request(
    data: ChangeRequestCreate,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Submit a change request for review."""
    await get_or_404(session, Project, data.project_id)

    cr = ChangeRequest(**data.model_dump(), status="pending")
    session.add(cr)
    await session.flush()
    await session.refresh(cr)
    return cr


@router.get("/change-requests", response_model=list[ChangeRequestResponse])
async def list_change_requests(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """List a project's change requests, newest first."""
    result = await session.execute(
        select(ChangeRequest)
        .where(ChangeRequest.project_id == project_id)
        .order_by(ChangeRequest.created_at.desc())
    )
    return result.scalars().all()


@router.get("/change-requests/{cr_id}", response_model=ChangeRequestResponse)
async def get_change_request(
    cr_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    return await get_or_404(session, ChangeRequest, cr_id, "Change request")


@router.post("/change-requests/{cr_id}/validate", response_model=ValidationResult)
async def validate(
    cr_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Check a change request against its project's budget and schedule."""
    cr = await get_or_404(session, ChangeRequest, cr_id, "Change request")
    project = await get_or_404(session, Project, cr.project_id)
    return validate_change_request(project, cr)


@router.post("/change-requests/{cr_id}/approve", response_model=ChangeRequestResponse)
async def approve_change_request(
    cr_id: uuid.UUID,
    decision: ChangeRequestDecision,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Approve a pending change request."""
    cr = await _pending_request(session, cr_id)
    cr.status = "approved"
    cr.approved_by = decision.decided_by
    cr.approval_date = datetime.now(timezone.utc)

    await session.flush()
    await session.refresh(cr)
    logger.info("Change request '%s' approved by %s", cr.title, decision.decided_by)
    return cr


@router.post("/change-requests/{cr_id}/reject", response_model=ChangeRequestResponse)
async def reject_change_request(
    cr_id: uuid.UUID,
    decision: ChangeRequestDecision,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Reject a pending change request; a reason is required."""
    if not decision.reason:
        raise HTTPException(status_code=400, detail="A rejection reason is required")

    cr = await _pending_request(session, cr_id)
    cr.status = "rejected"
    cr.approved_by = decision.decided_by
    cr.approval_date = datetime.now(timezone.utc)
    cr.rejection_reason = decision.reason

    await session.flush()
    await session.refresh(cr)
    logger.info("Change request '%s' rejected by %s", cr.title, decision.decided_by)
    return cr
