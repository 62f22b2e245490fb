"""Task CRUD and Gantt tree API routes."""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pmo.api.deps import check_dates, get_db, get_or_404, verify_api_key
from pmo.models.db import Project, Task
from pmo.models.schemas import (
    TaskCreate,
    TaskResponse,
    TaskSyncItem,
    TaskTreeNode,
    TaskUpdate,
)
from pmo.services.portfolio import project_tasks

logger = logging.getLogger(__name__)

router = APIRouter()

TEMP_ID_PREFIX = "temp-"


def build_task_tree(tasks: list[Task]) -> list[TaskTreeNode]:
    """Nest tasks under their parents; tasks with unknown parents become roots."""
    nodes = {task.id: TaskTreeNode.model_validate(task) for task in tasks}
    roots: list[TaskTreeNode] = []
    for task in tasks:
        node = nodes[task.id]
        parent = nodes.get(task.parent_id) if task.parent_id else None
        if parent is not None:
            parent.children.append(node)
        else:
            roots.append(node)
    return roots


@router.post("/tasks", response_model=TaskResponse, status_code=201)
async def create_task(
    data: TaskCreate,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Create a task."""
    await get_or_404(session, Project, data.project_id)
    check_dates(data.start_date, data.end_date)

    task = Task(**data.model_dump())
    session.add(task)
    await session.flush()
    await session.refresh(task)
    return task


@router.get("/tasks", response_model=list[TaskResponse])
async def list_tasks(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """List a project's tasks by start date."""
    return await project_tasks(session, project_id)


@router.get("/tasks/tree", response_model=list[TaskTreeNode])
async def get_task_tree(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Return a project's tasks nested by parent for the Gantt view."""
    return build_task_tree(await project_tasks(session, project_id))


@router.post("/tasks/sync/{project_id}", response_model=list[TaskResponse])
async def sync_task_tree(
    project_id: uuid.UUID,
    items: list[TaskSyncItem],
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Upsert a batch of tasks edited in the Gantt view.

    Items whose id starts with ``temp-`` (or does not exist yet) are
    created; the rest are updated in place.
    """
    await get_or_404(session, Project, project_id)

    synced: list[Task] = []
    for item in items:
        values = item.model_dump(exclude_unset=True, exclude={"id"})

        task = None
        if not item.id.startswith(TEMP_ID_PREFIX):
            try:
                task_id = uuid.UUID(item.id)
            except ValueError:
                raise HTTPException(status_code=400, detail=f"Invalid task id {item.id}")
            result = await session.execute(
                select(Task).where(Task.id == task_id, Task.project_id == project_id)
            )
            task = result.scalar_one_or_none()

        if task is None:
            missing = {"name", "start_date", "end_date"} - values.keys()
            if missing:
                raise HTTPException(
                    status_code=400,
                    detail=f"New task {item.id} is missing {', '.join(sorted(missing))}",
                )
            task = Task(project_id=project_id, **values)
            session.add(task)
        else:
            for key, value in values.items():
                setattr(task, key, value)

        check_dates(task.start_date, task.end_date)
        synced.append(task)

    await session.flush()
    for task in synced:
        await session.refresh(task)

    logger.info("Synced %d tasks for project %s", len(synced), project_id)
    return synced


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Get a task by ID."""
    return await get_or_404(session, Task, task_id)


@router.patch("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: uuid.UUID,
    data: TaskUpdate,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Update a task."""
    task = await get_or_404(session, Task, task_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(task, key, value)
    check_dates(task.start_date, task.end_date)

    await session.flush()
    await session.refresh(task)
    return task


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(
    task_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    _: str = Depends(verify_api_key),
):
    """Delete a task."""
    task = await get_or_404(session, Task, task_id)
    await session.delete(task)
    await session.flush()
