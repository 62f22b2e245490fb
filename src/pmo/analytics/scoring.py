"""Weighted-factor portfolio scoring and ranking."""

from __future__ import annotations

import logging
from typing import Any, Sequence

logger = logging.getLogger(__name__)


def calculate_project_score(
    factors: dict[str, float] | None,
    definitions: Sequence[Any],
) -> float:
    """Weighted mean of a project's factor scores.

    Factors are keyed by definition id. A factor the project has not
    scored counts as zero.
    """
    if not factors:
        return 0.0

    total_score = 0.0
    total_weight = 0.0
    for definition in definitions:
        score = factors.get(str(definition.id), 0) or 0
        total_score += score * definition.weight
        total_weight += definition.weight

    return total_score / total_weight if total_weight > 0 else 0.0


def rank_projects(projects: Sequence[Any]) -> list[Any]:
    """Assign rank 1..n by descending score; returns projects in rank order."""
    ordered = sorted(projects, key=lambda p: p.score or 0.0, reverse=True)
    for index, project in enumerate(ordered, start=1):
        project.rank = index
    return ordered


def rescore_portfolio(projects: Sequence[Any], definitions: Sequence[Any]) -> list[Any]:
    """Recompute every project's score, then re-rank the whole portfolio."""
    for project in projects:
        if project.factors:
            project.score = calculate_project_score(project.factors, definitions)
    ranked = rank_projects(projects)
    logger.info("Re-ranked %d projects against %d factors", len(ranked), len(definitions))
    return ranked
