"""Resource pool and team member API routes."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pmo.api.deps import get_db, get_or_404, verify_api_key
from pmo.models.db import ResourcePoolItem, TeamMember
from pmo.models.schemas import (
    ResourceCreate,
    ResourceResponse,
    ResourceUpdate,
    TeamMemberCreate,
    TeamMemberResponse,
    TeamMemberUpdate,
)

router = APIRouter()


@router.post("/resources", response_model=ResourceResponse, status_code=201)
async def create_resource(
    data: ResourceCreate,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Add a resource pool."""
    resource = ResourcePoolItem(**data.model_dump())
    session.add(resource)
    await session.flush()
    await session.refresh(resource, ["members"])
    return resource


@router.get("/resources", response_model=list[ResourceResponse])
async def list_resources(
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    result = await session.execute(select(ResourcePoolItem).order_by(ResourcePoolItem.name))
    return result.scalars().all()


@router.get("/resources/{resource_id}", response_model=ResourceResponse)
async def get_resource(
    resource_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    return await get_or_404(session, ResourcePoolItem, resource_id, "Resource")


@router.patch("/resources/{resource_id}", response_model=ResourceResponse)
async def update_resource(
    resource_id: uuid.UUID,
    data: ResourceUpdate,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    resource = await get_or_404(session, ResourcePoolItem, resource_id, "Resource")
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(resource, key, value)

    await session.flush()
    await session.refresh(resource, ["members"])
    return resource


@router.delete("/resources/{resource_id}", status_code=204)
async def delete_resource(
    resource_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Delete a resource pool and its members."""
    resource = await get_or_404(session, ResourcePoolItem, resource_id, "Resource")
    await session.delete(resource)
    await session.flush()


# ── Team members ──────────────────────────────────────────────────────────────


@router.post(
    "/resources/{resource_id}/members",
    response_model=TeamMemberResponse,
    status_code=201,
)
async def add_member(
    resource_id: uuid.UUID,
    data: TeamMemberCreate,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Add a named member to a resource pool."""
    await get_or_404(session, ResourcePoolItem, resource_id, "Resource")

    member = TeamMember(resource_id=resource_id, **data.model_dump())
    session.add(member)
    await session.flush()
    await session.refresh(member)
    return member


@router.patch("/resources/members/{member_id}", response_model=TeamMemberResponse)
async def update_member(
    member_id: uuid.UUID,
    data: TeamMemberUpdate,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    member = await get_or_404(session, TeamMember, member_id, "Team member")
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(member, key, value)

    await session.flush()
    await session.refresh(member)
    return member


@router.delete("/resources/members/{member_id}", status_code=204)
async def remove_member(
    member_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    member = await get_or_404(session, TeamMember, member_id, "Team member")
    await session.delete(member)
    await session.flush()
