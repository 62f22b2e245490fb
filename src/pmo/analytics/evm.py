"""Earned Value Management metrics for a single project.

The project budget (BAC) is spread across tasks in proportion to their
duration in days. Planned value accrues linearly over each task's span;
earned value follows reported progress.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Sequence

logger = logging.getLogger(__name__)


def _task_duration(task: Any) -> int:
    return max(1, (task.end_date - task.start_date).days)


def _schedule_status(spi: float) -> str:
    if spi >= 1:
        return "ahead"
    if spi >= 0.9:
        return "on_track"
    return "behind"


def _cost_status(cpi: float) -> str:
    if cpi >= 1:
        return "under_budget"
    if cpi >= 0.9:
        return "on_track"
    return "over_budget"


def calculate_evm(
    project: Any,
    tasks: Sequence[Any],
    as_of: date | None = None,
) -> dict[str, Any]:
    """Compute PV/EV/AC and the derived indices and forecasts.

    Args:
        project: Object with ``id``, ``budget`` and ``actual_cost``.
        tasks: Tasks with ``start_date``, ``end_date`` and ``progress``.
        as_of: Status date; defaults to today.

    Returns:
        Dict of EVM quantities plus a ``status`` dict with schedule and
        cost verdicts.
    """
    as_of = as_of or date.today()
    bac = project.budget or 0.0
    ac = project.actual_cost or 0.0

    if not tasks or bac == 0:
        return {
            "project_id": project.id,
            "as_of": as_of,
            "bac": bac,
            "pv": 0.0,
            "ev": 0.0,
            "ac": ac,
            "sv": 0.0,
            "cv": 0.0,
            "spi": 1.0,
            "cpi": 1.0,
            "eac": bac,
            "etc": 0.0,
            "vac": 0.0,
            "tcpi": 1.0,
            "status": {"schedule": "on_track", "cost": "on_track"},
        }

    total_duration = sum(_task_duration(t) for t in tasks)
    cost_per_day = bac / total_duration

    pv = 0.0
    ev = 0.0
    for task in tasks:
        duration = _task_duration(task)
        task_budget = duration * cost_per_day

        if as_of >= task.start_date:
            elapsed = min(duration, max(0, (as_of - task.start_date).days))
            pv += task_budget * elapsed / duration

        ev += task_budget * (task.progress or 0) / 100

    sv = ev - pv
    cv = ev - ac
    spi = ev / pv if pv > 0 else 1.0
    cpi = ev / ac if ac > 0 else 1.0

    # A near-zero CPI would explode the forecast; fall back to BAC-based EAC.
    eac = ac + (bac - ev) / cpi if cpi > 0.1 else ac + (bac - ev)
    etc = eac - ac
    vac = bac - eac
    tcpi = (bac - ev) / (bac - ac) if bac != ac else 1.0

    metrics = {
        "project_id": project.id,
        "as_of": as_of,
        "bac": bac,
        "pv": pv,
        "ev": ev,
        "ac": ac,
        "sv": sv,
        "cv": cv,
        "spi": spi,
        "cpi": cpi,
        "eac": eac,
        "etc": etc,
        "vac": vac,
        "tcpi": tcpi,
        "status": {"schedule": _schedule_status(spi), "cost": _cost_status(cpi)},
    }
    logger.debug(
        "EVM for project %s as of %s: spi=%.2f cpi=%.2f", project.id, as_of, spi, cpi
    )
    return metrics


def _add_months(day: date, months: int) -> date:
    index = day.month - 1 + months
    return date(day.year + index // 12, index % 12 + 1, 1)


def forecast_cost(
    metrics: dict[str, Any],
    months: int = 6,
    as_of: date | None = None,
) -> list[dict[str, Any]]:
    """Project actual cost forward month by month until it reaches EAC."""
    if months < 1:
        raise ValueError("months must be at least 1")

    as_of = as_of or metrics.get("as_of") or date.today()
    points: list[dict[str, Any]] = [
        {
            "month": as_of.strftime("%Y-%m"),
            "ac": metrics["ac"],
            "ev": metrics["ev"],
            "pv": metrics["pv"],
            "bac": metrics["bac"],
            "type": "current",
        }
    ]

    monthly_burn = metrics["etc"] / months
    for i in range(1, months + 1):
        points.append(
            {
                "month": _add_months(as_of, i).strftime("%Y-%m"),
                "ac": metrics["ac"] + monthly_burn * i,
                "bac": metrics["bac"],
                "type": "forecast",
            }
        )
    return points
