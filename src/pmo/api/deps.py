"""FastAPI dependency injection helpers."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from datetime import date
from typing import TypeVar

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pmo.config import settings
from pmo.db.session import get_session
from pmo.models.db import Base

ModelT = TypeVar("ModelT", bound=Base)

# API key security
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session."""
    async for session in get_session():
        yield session


async def verify_api_key(
    api_key: str | None = Security(api_key_header),
) -> str:
    """Verify the API key from the request header.

    In development mode, allows requests without an API key.
    """
    if settings.pmo_env == "development":
        return api_key or "dev"

    if not api_key or api_key != settings.pmo_api_key:
        raise HTTPException(status_code=403, detail="Invalid or missing API key")

    return api_key


async def get_or_404(
    session: AsyncSession,
    model: type[ModelT],
    object_id: uuid.UUID,
    label: str | None = None,
) -> ModelT:
    """Fetch a row by primary key or raise a 404 naming the entity."""
    result = await session.execute(select(model).where(model.id == object_id))
    obj = result.scalar_one_or_none()
    if not obj:
        name = label or model.__name__
        raise HTTPException(status_code=404, detail=f"{name} not found")
    return obj


def check_dates(start: date | None, end: date | None) -> None:
    """Reject a date range whose end precedes its start."""
    if start and end and end < start:
        raise HTTPException(status_code=400, detail="end_date must not precede start_date")
