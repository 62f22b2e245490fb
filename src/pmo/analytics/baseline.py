"""Project baselines: snapshots, comparison and trend analysis."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Sequence

from pmo.analytics.scope import DEFAULT_HOURS_PER_DAY, total_effort_hours

# Share of tasks assumed complete at the comparison point.
PLANNED_COMPLETION_RATE = 0.5


@dataclass
class TaskSnapshot:
    """A task as frozen inside a baseline snapshot."""

    id: str
    name: str
    start_date: date
    end_date: date
    status: str = "planning"
    progress: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskSnapshot:
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            start_date=date.fromisoformat(data["start_date"]),
            end_date=date.fromisoformat(data["end_date"]),
            status=data.get("status") or "planning",
            progress=data.get("progress") or 0,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "status": self.status,
            "progress": self.progress,
        }


def snapshot_project(project: Any, tasks: Sequence[Any]) -> dict[str, Any]:
    """Freeze the project's schedule, budget and tasks as plain JSON."""
    return {
        "start_date": project.start_date.isoformat(),
        "end_date": project.end_date.isoformat(),
        "budget": project.budget or 0.0,
        "tasks": [
            TaskSnapshot(
                id=str(t.id),
                name=t.name,
                start_date=t.start_date,
                end_date=t.end_date,
                status=t.status or "planning",
                progress=t.progress or 0,
            ).to_dict()
            for t in tasks
        ],
    }


def snapshot_tasks(snapshot: dict[str, Any]) -> list[TaskSnapshot]:
    return [TaskSnapshot.from_dict(t) for t in snapshot.get("tasks", [])]


def _overall_health(spi: float, cpi: float, slip_days: int) -> str:
    if spi < 0.8 or cpi < 0.8 or slip_days > 30:
        return "critical"
    if spi < 0.9 or cpi < 0.9 or slip_days > 14:
        return "warning"
    return "good"


def compare_with_baseline(
    project: Any,
    tasks: Sequence[Any],
    baseline: Any,
    hours_per_day: int = DEFAULT_HOURS_PER_DAY,
) -> dict[str, Any]:
    """Compare the live project against one of its baselines."""
    snapshot = baseline.snapshot
    frozen = snapshot_tasks(snapshot)

    completed = sum(1 for t in tasks if t.status == "completed")
    current_state = {
        "total_tasks": len(tasks),
        "completed_tasks": completed,
        "total_effort": total_effort_hours(tasks, hours_per_day),
        "actual_cost": project.actual_cost or 0.0,
        "end_date": project.end_date,
    }
    baseline_state = {
        "total_tasks": len(frozen),
        "completed_tasks": 0,
        "total_effort": total_effort_hours(frozen, hours_per_day),
        "planned_cost": snapshot.get("budget") or 0.0,
        "end_date": date.fromisoformat(snapshot["end_date"]),
    }

    slip_days = (current_state["end_date"] - baseline_state["end_date"]).days
    variances = {
        "task_variance": current_state["total_tasks"] - baseline_state["total_tasks"],
        "effort_variance": current_state["total_effort"] - baseline_state["total_effort"],
        "cost_variance": current_state["actual_cost"] - baseline_state["planned_cost"],
        "schedule_variance_days": slip_days,
    }

    completion_rate = completed / len(tasks) if tasks else 0.0
    spi = completion_rate / PLANNED_COMPLETION_RATE
    earned = baseline_state["planned_cost"] * completion_rate
    actual = current_state["actual_cost"]
    cpi = earned / actual if actual > 0 else 1.0

    return {
        "baseline_id": baseline.id,
        "baseline_name": baseline.name,
        "current_state": current_state,
        "baseline_state": baseline_state,
        "variances": variances,
        "performance": {
            "spi": spi,
            "cpi": cpi,
            "overall_health": _overall_health(spi, cpi, slip_days),
        },
    }


def _growth(previous: float, current: float) -> float:
    if previous == 0:
        return 0.0 if current == 0 else float("inf")
    return (current - previous) / previous


def analyze_baseline_trend(
    project: Any,
    tasks: Sequence[Any],
    baselines: Sequence[Any],
    as_of: datetime | None = None,
    hours_per_day: int = DEFAULT_HOURS_PER_DAY,
) -> dict[str, Any]:
    """Trend of task count and effort across baselines up to today.

    The verdict compares the last two points only: the live project and
    the most recent baseline.
    """
    points = []
    for baseline in sorted(baselines, key=lambda b: b.created_at):
        frozen = snapshot_tasks(baseline.snapshot)
        points.append(
            {
                "date": baseline.created_at,
                "task_count": len(frozen),
                "effort": total_effort_hours(frozen, hours_per_day),
                "cost": baseline.snapshot.get("budget") or 0.0,
            }
        )
    points.append(
        {
            "date": as_of or datetime.now(timezone.utc),
            "task_count": len(tasks),
            "effort": total_effort_hours(tasks, hours_per_day),
            "cost": project.actual_cost or 0.0,
        }
    )

    trend = "stable"
    if len(points) >= 2:
        previous, recent = points[-2], points[-1]
        task_growth = _growth(previous["task_count"], recent["task_count"])
        effort_growth = _growth(previous["effort"], recent["effort"])
        if task_growth > 0.1 or effort_growth > 0.15:
            trend = "degrading"
        elif task_growth < -0.05 and effort_growth < -0.05:
            trend = "improving"

    return {"trend": trend, "points": points}
