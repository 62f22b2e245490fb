"""Stage-gate workflow: a fixed five-stage checklist with manual approval.

Gates never move on their own. Every status change comes from an explicit
request, approval, rejection or requirement toggle.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)

STAGES = ("initiation", "planning", "execution", "monitoring", "closing")
PASSED_STATUSES = ("approved", "conditional")


def _req(req_id: str, description: str, required: bool = True) -> dict[str, Any]:
    return {
        "id": req_id,
        "description": description,
        "required": required,
        "completed": False,
    }


DEFAULT_GATES: list[dict[str, Any]] = [
    {
        "stage": "initiation",
        "name": "Gate 1: Project initiation approval",
        "description": "Project charter and preliminary scope definition",
        "requirements": [
            _req("req-1-1", "Project charter drafted"),
            _req("req-1-2", "Stakeholders identified"),
            _req("req-1-3", "Preliminary budget approved"),
        ],
    },
    {
        "stage": "planning",
        "name": "Gate 2: Plan approval",
        "description": "Detailed project plan and resource allocation",
        "requirements": [
            _req("req-2-1", "Project plan completed"),
            _req("req-2-2", "Risk assessment completed"),
            _req("req-2-3", "Resources allocated"),
            _req("req-2-4", "Quality standards defined", required=False),
        ],
    },
    {
        "stage": "execution",
        "name": "Gate 3: Execution approval",
        "description": "Start of project execution",
        "requirements": [
            _req("req-3-1", "Team assembled"),
            _req("req-3-2", "Kick-off meeting held"),
            _req("req-3-3", "Baseline established"),
        ],
    },
    {
        "stage": "monitoring",
        "name": "Gate 4: Monitoring approval",
        "description": "Progress and quality monitoring in place",
        "requirements": [
            _req("req-4-1", "Progress reporting established"),
            _req("req-4-2", "Change control process in effect"),
            _req("req-4-3", "Quality checkpoints set", required=False),
        ],
    },
    {
        "stage": "closing",
        "name": "Gate 5: Project closure",
        "description": "Acceptance and lessons learned",
        "requirements": [
            _req("req-5-1", "All deliverables completed"),
            _req("req-5-2", "Customer acceptance obtained"),
            _req("req-5-3", "Lessons learned recorded"),
            _req("req-5-4", "Project documents archived", required=False),
        ],
    },
]


def default_gates() -> list[dict[str, Any]]:
    """Fresh copies of the standard gate template, with positions."""
    return [
        {
            **gate,
            "position": position,
            "requirements": [dict(r) for r in gate["requirements"]],
        }
        for position, gate in enumerate(DEFAULT_GATES)
    ]


def next_stage(current: str) -> str | None:
    """The stage after *current*, or ``None`` once the project is closing."""
    index = STAGES.index(current)
    if index < len(STAGES) - 1:
        return STAGES[index + 1]
    return None


def can_approve_gate(gate: Any) -> bool:
    """A gate can be approved once every required item is completed."""
    return all(r["completed"] for r in gate.requirements if r["required"])


def gate_completion_percentage(gate: Any) -> int:
    total = len(gate.requirements)
    if total == 0:
        return 100
    completed = sum(1 for r in gate.requirements if r["completed"])
    return round(completed / total * 100)


def request_gate(gate: Any) -> Any:
    if gate.status in PASSED_STATUSES:
        raise ValueError(f"Gate '{gate.name}' is already {gate.status}")
    gate.status = "requested"
    return gate


def approve_gate(
    gate: Any,
    approver: str,
    comments: str | None = None,
    conditions: list[str] | None = None,
) -> Any:
    """Approve a gate; with conditions the approval is conditional."""
    if not can_approve_gate(gate):
        raise ValueError(
            f"Gate '{gate.name}' has incomplete required items and cannot be approved"
        )
    gate.status = "conditional" if conditions else "approved"
    gate.approved_by = approver
    gate.approval_date = datetime.now(timezone.utc)
    gate.comments = comments
    gate.conditions = list(conditions or [])
    logger.info("Gate %s %s by %s", gate.name, gate.status, approver)
    return gate


def reject_gate(gate: Any, approver: str, comments: str) -> Any:
    if not comments:
        raise ValueError("A rejection needs comments")
    gate.status = "rejected"
    gate.approved_by = approver
    gate.approval_date = datetime.now(timezone.utc)
    gate.comments = comments
    logger.info("Gate %s rejected by %s", gate.name, approver)
    return gate


def update_requirement(
    gate: Any,
    requirement_id: str,
    completed: bool,
    user: str | None = None,
    evidence: str | None = None,
) -> Any:
    """Toggle one checklist item.

    The requirements list is replaced rather than mutated so the ORM sees
    the change on the JSON column.
    """
    if not any(r["id"] == requirement_id for r in gate.requirements):
        raise KeyError(requirement_id)

    now = datetime.now(timezone.utc).isoformat()
    gate.requirements = [
        {
            **r,
            "completed": completed,
            "completed_date": now if completed else None,
            "completed_by": user if completed else None,
            "evidence": evidence if completed else None,
        }
        if r["id"] == requirement_id
        else r
        for r in gate.requirements
    ]
    return gate


def advance_stage(current: str, gates: list[Any]) -> str:
    """Move to the next stage once the current stage's gate has passed."""
    gate = next((g for g in gates if g.stage == current), None)
    if gate is None or gate.status not in PASSED_STATUSES:
        raise ValueError(f"The {current} gate has not been approved")
    following = next_stage(current)
    if following is None:
        raise ValueError("Project is already in its final stage")
    return following
