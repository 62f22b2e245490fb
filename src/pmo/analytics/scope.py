"""Scope-creep monitoring, change-request validation and ghost-task detection."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Sequence

logger = logging.getLogger(__name__)

DEFAULT_HOURS_PER_DAY = 8
DEFAULT_CREEP_THRESHOLD = 30.0
MIN_JUSTIFICATION_LENGTH = 20


def task_effort_hours(task: Any, hours_per_day: int = DEFAULT_HOURS_PER_DAY) -> int:
    """Effort implied by a task's date span."""
    return (task.end_date - task.start_date).days * hours_per_day


def total_effort_hours(
    tasks: Iterable[Any], hours_per_day: int = DEFAULT_HOURS_PER_DAY
) -> int:
    return sum(task_effort_hours(t, hours_per_day) for t in tasks)


def calculate_scope_creep(
    project: Any,
    tasks: Sequence[Any],
    change_requests: Sequence[Any],
    baseline_tasks: Sequence[Any] | None = None,
    threshold: float = DEFAULT_CREEP_THRESHOLD,
    hours_per_day: int = DEFAULT_HOURS_PER_DAY,
) -> dict[str, Any]:
    """Measure effort growth against the active baseline.

    Without a baseline the current tasks are their own baseline, so the
    creep is zero.
    """
    current = total_effort_hours(tasks, hours_per_day)
    baseline = (
        total_effort_hours(baseline_tasks, hours_per_day)
        if baseline_tasks is not None
        else current
    )
    creep = (current - baseline) / baseline * 100 if baseline > 0 else 0.0

    statuses = [cr.status for cr in change_requests]
    over = creep > threshold
    if over:
        logger.info(
            "Project %s exceeds scope-creep threshold: %.1f%% > %.1f%%",
            project.id,
            creep,
            threshold,
        )

    return {
        "project_id": project.id,
        "project_name": project.name,
        "baseline_effort_hours": baseline,
        "current_effort_hours": current,
        "creep_percentage": creep,
        "threshold": threshold,
        "total_change_requests": len(statuses),
        "approved_changes": statuses.count("approved"),
        "rejected_changes": statuses.count("rejected"),
        "pending_changes": statuses.count("pending"),
        "is_over_threshold": over,
        "requires_rebaseline": over,
        "calculated_at": datetime.now(timezone.utc),
    }


def validate_change_request(project: Any, change_request: Any) -> dict[str, Any]:
    """Check a change request against the project's budget and schedule."""
    warnings: list[str] = []
    errors: list[str] = []

    cost_increase = change_request.estimated_cost_increase or 0.0
    if project.budget and cost_increase > 0:
        remaining = project.budget - (project.actual_cost or 0.0)
        if cost_increase > remaining:
            errors.append(
                f"Cost increase ({cost_increase:,.2f}) exceeds remaining budget "
                f"({remaining:,.2f})"
            )
        elif cost_increase > remaining * 0.8:
            warnings.append(
                f"Change consumes {round(cost_increase / remaining * 100)}% "
                f"of the remaining budget"
            )

    delay = change_request.schedule_impact_days or 0
    if delay > 0:
        new_end = project.end_date + timedelta(days=delay)
        warnings.append(
            f"Project end date moves from {project.end_date.isoformat()} "
            f"to {new_end.isoformat()}"
        )

    justification = change_request.business_justification or ""
    if len(justification) < MIN_JUSTIFICATION_LENGTH:
        errors.append(
            f"A business justification of at least {MIN_JUSTIFICATION_LENGTH} "
            f"characters is required"
        )

    return {"is_valid": not errors, "warnings": warnings, "errors": errors}


def detect_ghost_tasks(
    tasks: Iterable[Any],
    requirements: Iterable[Any],
    hours_per_day: int = DEFAULT_HOURS_PER_DAY,
) -> list[dict[str, Any]]:
    """Tasks that no requirement traces to."""
    linked = {
        str(task_id)
        for req in requirements
        for task_id in (req.related_task_ids or [])
    }
    return [
        {
            "task_id": task.id,
            "task_name": task.name,
            "reason": "no_requirement_link",
            "estimated_effort": task_effort_hours(task, hours_per_day),
        }
        for task in tasks
        if str(task.id) not in linked
    ]
