"""Risk scoring on the 5x5 probability/impact grid.

Score is ``probability * impact`` (1..25) and priority buckets are
monotonic in score:

- critical: 16-25
- high: 10-15
- medium: 5-9
- low: 1-4
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime, timezone
from typing import Any, Iterable, Sequence

logger = logging.getLogger(__name__)

GRID_SIZE = 5

CATEGORIES = ("schedule", "cost", "resource", "technical", "external", "quality", "scope")
PRIORITIES = ("critical", "high", "medium", "low")
CLOSED_STATUSES = ("resolved", "accepted")

PRIORITY_WEIGHTS: dict[str, int] = {
    "critical": 4,
    "high": 3,
    "medium": 2,
    "low": 1,
}


def calculate_risk_score(probability: int, impact: int) -> int:
    """Return the risk score for a probability/impact pair."""
    return probability * impact


def calculate_risk_priority(risk_score: int) -> str:
    """Map a risk score to its priority bucket."""
    if risk_score >= 16:
        return "critical"
    if risk_score >= 10:
        return "high"
    if risk_score >= 5:
        return "medium"
    return "low"


def score_fields(probability: int, impact: int) -> dict[str, Any]:
    """Derived columns stored alongside a risk's probability and impact."""
    score = calculate_risk_score(probability, impact)
    return {"risk_score": score, "priority": calculate_risk_priority(score)}


def is_active(risk: Any) -> bool:
    return risk.status not in CLOSED_STATUSES


def build_heatmap(risks: Sequence[Any], high_risk_threshold: int = 15) -> dict[str, Any]:
    """Count risks per cell of the probability x impact matrix.

    Rows are probability 1..5, columns impact 1..5. Out-of-range values are
    clamped into the grid rather than dropped.
    """
    matrix = [[0] * GRID_SIZE for _ in range(GRID_SIZE)]
    for risk in risks:
        p = min(max(risk.probability - 1, 0), GRID_SIZE - 1)
        i = min(max(risk.impact - 1, 0), GRID_SIZE - 1)
        matrix[p][i] += 1

    return {
        "matrix": matrix,
        "total_count": len(risks),
        "high_risks": sum(1 for r in risks if r.risk_score >= high_risk_threshold),
    }


def calculate_project_risk_score(risks: Iterable[Any]) -> float:
    """Priority-weighted average score over the project's active risks."""
    active = [r for r in risks if is_active(r)]
    if not active:
        return 0.0

    weighted = sum(r.risk_score * PRIORITY_WEIGHTS[r.priority] for r in active)
    total_weight = sum(PRIORITY_WEIGHTS[r.priority] for r in active)
    return round(weighted / total_weight, 1)


def category_distribution(risks: Iterable[Any]) -> dict[str, int]:
    counts = Counter(r.category for r in risks)
    return {category: counts.get(category, 0) for category in CATEGORIES}


def priority_distribution(risks: Iterable[Any]) -> dict[str, int]:
    counts = Counter(r.priority for r in risks)
    return {priority: counts.get(priority, 0) for priority in PRIORITIES}


def top_risks(risks: Iterable[Any], limit: int = 5) -> list[Any]:
    """Highest-scoring active risks, best first."""
    active = [r for r in risks if is_active(r)]
    return sorted(active, key=lambda r: r.risk_score, reverse=True)[:limit]


def needs_review(risk: Any, today: date | None = None) -> bool:
    if risk.next_review_date is None:
        return False
    return risk.next_review_date <= (today or date.today())


def risks_needing_review(risks: Iterable[Any], today: date | None = None) -> list[Any]:
    return [r for r in risks if needs_review(r, today) and r.status != "resolved"]


def summarize(risks: Sequence[Any], today: date | None = None) -> dict[str, Any]:
    """Aggregate view used by the risk dashboard."""
    return {
        "total_count": len(risks),
        "active_count": sum(1 for r in risks if is_active(r)),
        "project_risk_score": calculate_project_risk_score(risks),
        "by_category": category_distribution(risks),
        "by_priority": priority_distribution(risks),
        "top_risks": [r.id for r in top_risks(risks)],
        "needs_review": [r.id for r in risks_needing_review(risks, today)],
    }


# ── Change tracking ───────────────────────────────────────────────────────────

_TRACKED_FIELDS = {
    "probability": "probability_changed",
    "impact": "impact_changed",
    "status": "status_changed",
}


def track_changes(risk: Any, updates: dict[str, Any], user: str) -> list[dict[str, Any]]:
    """Build history entries for tracked fields that an update changes."""
    now = datetime.now(timezone.utc).isoformat()
    entries: list[dict[str, Any]] = []
    for field, action in _TRACKED_FIELDS.items():
        if field not in updates or updates[field] is None:
            continue
        old, new = getattr(risk, field), updates[field]
        if old == new:
            continue
        entries.append(
            {
                "date": now,
                "user": user,
                "action": action,
                "description": f"{field} changed from {old} to {new}",
                "old_value": old,
                "new_value": new,
            }
        )
    return entries


def creation_entry(title: str, user: str) -> dict[str, Any]:
    return {
        "date": datetime.now(timezone.utc).isoformat(),
        "user": user,
        "action": "created",
        "description": f"Risk created: {title}",
    }


def mitigation_entry(description: str, user: str) -> dict[str, Any]:
    return {
        "date": datetime.now(timezone.utc).isoformat(),
        "user": user,
        "action": "mitigation_added",
        "description": f"Mitigation added: {description}",
    }
