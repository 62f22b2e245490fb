"""Tests for the stage-gate workflow."""

from __future__ import annotations

import uuid

import pytest

from pmo.analytics import stage_gate
from pmo.models.db import StageGate


@pytest.fixture
def gates(sample_project_id):
    """The standard five gates for the sample project, all pending."""
    return [
        StageGate(id=uuid.uuid4(), project_id=sample_project_id, status="pending", **g)
        for g in stage_gate.default_gates()
    ]


def complete_required(gate):
    for req in gate.requirements:
        if req["required"]:
            stage_gate.update_requirement(gate, req["id"], True, user="pm")


class TestTemplate:
    def test_five_gates_in_stage_order(self):
        gates = stage_gate.default_gates()
        assert [g["stage"] for g in gates] == list(stage_gate.STAGES)
        assert [g["position"] for g in gates] == [0, 1, 2, 3, 4]

    def test_copies_are_independent(self):
        first = stage_gate.default_gates()
        first[0]["requirements"][0]["completed"] = True
        assert stage_gate.default_gates()[0]["requirements"][0]["completed"] is False

    def test_next_stage(self):
        assert stage_gate.next_stage("initiation") == "planning"
        assert stage_gate.next_stage("closing") is None


class TestRequirements:
    """Checklist toggling and completion."""

    def test_fresh_gate_cannot_be_approved(self, gates):
        assert stage_gate.can_approve_gate(gates[0]) is False
        assert stage_gate.gate_completion_percentage(gates[0]) == 0

    def test_required_items_unlock_approval(self, gates):
        planning = gates[1]
        complete_required(planning)

        assert stage_gate.can_approve_gate(planning) is True
        # 3 of 4 items, the optional one still open
        assert stage_gate.gate_completion_percentage(planning) == 75

    def test_toggle_records_who_and_when(self, gates):
        gate = gates[0]
        stage_gate.update_requirement(gate, "req-1-1", True, user="pm", evidence="charter.pdf")
        req = gate.requirements[0]

        assert req["completed"] is True
        assert req["completed_by"] == "pm"
        assert req["evidence"] == "charter.pdf"
        assert req["completed_date"] is not None

    def test_untoggle_clears_completion(self, gates):
        gate = gates[0]
        stage_gate.update_requirement(gate, "req-1-1", True, user="pm")
        stage_gate.update_requirement(gate, "req-1-1", False)
        assert gate.requirements[0]["completed_by"] is None

    def test_unknown_requirement(self, gates):
        with pytest.raises(KeyError):
            stage_gate.update_requirement(gates[0], "req-9-9", True)

    def test_gate_without_requirements_is_complete(self, gates):
        gates[0].requirements = []
        assert stage_gate.gate_completion_percentage(gates[0]) == 100


class TestApproval:
    """Request, approve and reject transitions."""

    def test_approve_incomplete_gate_fails(self, gates):
        with pytest.raises(ValueError):
            stage_gate.approve_gate(gates[0], "sponsor")

    def test_approve_complete_gate(self, gates):
        gate = gates[0]
        complete_required(gate)
        stage_gate.approve_gate(gate, "sponsor", comments="Go")

        assert gate.status == "approved"
        assert gate.approved_by == "sponsor"
        assert gate.approval_date is not None

    def test_conditions_make_approval_conditional(self, gates):
        gate = gates[0]
        complete_required(gate)
        stage_gate.approve_gate(gate, "sponsor", conditions=["Hire a QA lead"])

        assert gate.status == "conditional"
        assert gate.conditions == ["Hire a QA lead"]

    def test_reject_requires_comments(self, gates):
        with pytest.raises(ValueError):
            stage_gate.reject_gate(gates[0], "sponsor", "")

        stage_gate.reject_gate(gates[0], "sponsor", "Charter incomplete")
        assert gates[0].status == "rejected"

    def test_request_passed_gate_fails(self, gates):
        gate = gates[0]
        complete_required(gate)
        stage_gate.approve_gate(gate, "sponsor")
        with pytest.raises(ValueError):
            stage_gate.request_gate(gate)

    def test_request_pending_gate(self, gates):
        stage_gate.request_gate(gates[0])
        assert gates[0].status == "requested"


class TestAdvanceStage:
    def test_advance_after_approval(self, gates):
        complete_required(gates[0])
        stage_gate.approve_gate(gates[0], "sponsor")
        assert stage_gate.advance_stage("initiation", gates) == "planning"

    def test_conditional_approval_also_advances(self, gates):
        complete_required(gates[0])
        stage_gate.approve_gate(gates[0], "sponsor", conditions=["Review in 30 days"])
        assert stage_gate.advance_stage("initiation", gates) == "planning"

    def test_cannot_advance_past_unapproved_gate(self, gates):
        with pytest.raises(ValueError):
            stage_gate.advance_stage("initiation", gates)

    def test_cannot_advance_past_final_stage(self, gates):
        complete_required(gates[4])
        stage_gate.approve_gate(gates[4], "sponsor")
        with pytest.raises(ValueError):
            stage_gate.advance_stage("closing", gates)
