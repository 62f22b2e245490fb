"""Stateless portfolio analytics computed from fetched records."""

from pmo.analytics.evm import calculate_evm, forecast_cost
from pmo.analytics.risk import (
    build_heatmap,
    calculate_project_risk_score,
    calculate_risk_priority,
    calculate_risk_score,
)
from pmo.analytics.scope import (
    calculate_scope_creep,
    detect_ghost_tasks,
    validate_change_request,
)

__all__ = [
    "build_heatmap",
    "calculate_evm",
    "calculate_project_risk_score",
    "calculate_risk_priority",
    "calculate_risk_score",
    "calculate_scope_creep",
    "detect_ghost_tasks",
    "forecast_cost",
    "validate_change_request",
]
