"""Cross-project dependency graph: delay impact, cycles and critical path."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Sequence

logger = logging.getLogger(__name__)

SUSPEND_COST_THRESHOLD = 50_000.0


def _graph(dependencies: Sequence[Any]) -> dict[str, list[str]]:
    graph: dict[str, list[str]] = defaultdict(list)
    for dep in dependencies:
        graph[str(dep.from_project_id)].append(str(dep.to_project_id))
    return graph


def _duration_days(project: Any) -> int:
    return (project.end_date - project.start_date).days


def _impact_level(criticality: str, delay_days: int) -> str:
    if criticality == "critical" or delay_days > 30:
        return "high"
    if criticality == "high" or delay_days > 14:
        return "medium"
    return "low"


_RECOMMENDATIONS = {
    "high": "Suspend '{name}' and release its resources instead of waiting idle.",
    "medium": "Reschedule '{name}' or look for a workaround.",
    "low": "Keep monitoring '{name}'; no adjustment needed yet.",
}


def analyze_dependency_impact(
    delayed_project_id: Any,
    delay_days: int,
    projects: Sequence[Any],
    dependencies: Sequence[Any],
) -> list[dict[str, Any]]:
    """Projects blocked by *delayed_project_id* and how hard the slip hits them."""
    by_id = {str(p.id): p for p in projects}
    impacts = []
    for dep in dependencies:
        if str(dep.from_project_id) != str(delayed_project_id):
            continue
        if dep.dependency_type != "blocks":
            continue
        affected = by_id.get(str(dep.to_project_id))
        if affected is None:
            continue

        level = _impact_level(dep.criticality, delay_days)
        impacts.append(
            {
                "affected_project_id": affected.id,
                "affected_project_name": affected.name,
                "delay_days": delay_days,
                "risk_level": level,
                "recommendation": _RECOMMENDATIONS[level].format(name=affected.name),
            }
        )
    return impacts


def detect_circular_dependencies(dependencies: Sequence[Any]) -> list[list[str]]:
    """Every cycle found by depth-first search, each closed on its first node."""
    graph = _graph(dependencies)
    cycles: list[list[str]] = []
    visited: set[str] = set()
    on_stack: set[str] = set()

    def visit(node: str, path: list[str]) -> None:
        visited.add(node)
        on_stack.add(node)
        path = path + [node]
        for neighbour in graph.get(node, []):
            if neighbour not in visited:
                visit(neighbour, path)
            elif neighbour in on_stack:
                start = path.index(neighbour)
                cycles.append(path[start:] + [neighbour])
        on_stack.discard(node)

    for node in list(graph):
        if node not in visited:
            visit(node, [])

    if cycles:
        logger.warning("Detected %d dependency cycle(s)", len(cycles))
    return cycles


def calculate_critical_path(
    dependencies: Sequence[Any],
    projects: Sequence[Any],
) -> dict[str, Any]:
    """Longest root-to-leaf chain weighted by project duration in days."""
    graph = _graph(dependencies)
    durations = {str(p.id): _duration_days(p) for p in projects}
    names = {str(p.id): p.name for p in projects}

    targets = {n for neighbours in graph.values() for n in neighbours}
    roots = [n for n in graph if n not in targets]

    best_path: list[str] = []
    best_duration = 0

    def walk(node: str, path: list[str], total: int) -> None:
        nonlocal best_path, best_duration
        neighbours = [n for n in graph.get(node, []) if n not in path]
        if not neighbours:
            if total > best_duration:
                best_duration = total
                best_path = list(path)
            return
        for neighbour in neighbours:
            walk(neighbour, path + [neighbour], total + durations.get(neighbour, 0))

    for root in roots:
        walk(root, [root], durations.get(root, 0))

    return {
        "path": best_path,
        "project_names": [names[n] for n in best_path if n in names],
        "total_duration_days": best_duration,
    }


def circuit_breaker_recommendation(
    impact: dict[str, Any],
    waiting_cost_per_day: float = 5000.0,
) -> dict[str, Any]:
    """Decide whether a blocked project should be suspended rather than wait."""
    waiting_cost = impact["delay_days"] * waiting_cost_per_day
    suspend = waiting_cost > SUSPEND_COST_THRESHOLD and impact["risk_level"] == "high"
    return {
        "should_suspend": suspend,
        "waiting_cost": waiting_cost,
        "estimated_savings": waiting_cost if suspend else 0.0,
    }
