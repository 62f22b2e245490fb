"""Tests for risk scoring, heatmap and register summaries."""

from __future__ import annotations

from datetime import date

import pytest

from pmo.analytics import risk


class TestRiskScoring:
    """Score is P x I and priority buckets follow the score."""

    def test_score_is_product(self):
        assert risk.calculate_risk_score(4, 5) == 20

    @pytest.mark.parametrize(
        "score,priority",
        [(25, "critical"), (16, "critical"), (15, "high"), (10, "high"),
         (9, "medium"), (5, "medium"), (4, "low"), (1, "low")],
    )
    def test_priority_buckets(self, score, priority):
        assert risk.calculate_risk_priority(score) == priority

    def test_score_fields(self):
        assert risk.score_fields(3, 4) == {"risk_score": 12, "priority": "high"}

    @pytest.mark.parametrize("probability", range(1, 6))
    @pytest.mark.parametrize("impact", range(1, 6))
    def test_every_pair_scores_its_product(self, probability, impact):
        fields = risk.score_fields(probability, impact)
        assert fields["risk_score"] == probability * impact
        assert fields["priority"] == risk.calculate_risk_priority(probability * impact)

    def test_priority_never_drops_as_score_rises(self):
        order = ["low", "medium", "high", "critical"]
        scores = sorted({p * i for p in range(1, 6) for i in range(1, 6)})
        ranks = [order.index(risk.calculate_risk_priority(s)) for s in scores]
        assert ranks == sorted(ranks)
        assert ranks[0] == 0 and ranks[-1] == 3


class TestHeatmap:
    """Tests for the 5x5 probability/impact matrix."""

    def test_counts_per_cell(self, make_risk):
        risks = [make_risk(5, 5), make_risk(5, 5), make_risk(1, 2), make_risk(3, 5)]
        heatmap = risk.build_heatmap(risks)

        assert heatmap["matrix"][4][4] == 2
        assert heatmap["matrix"][0][1] == 1
        assert heatmap["matrix"][2][4] == 1
        assert sum(map(sum, heatmap["matrix"])) == 4
        assert heatmap["total_count"] == 4

    def test_high_risks_use_threshold(self, make_risk):
        risks = [make_risk(5, 5), make_risk(3, 5), make_risk(2, 3)]
        assert risk.build_heatmap(risks)["high_risks"] == 2
        assert risk.build_heatmap(risks, high_risk_threshold=20)["high_risks"] == 1

    def test_out_of_range_values_are_clamped(self, make_risk):
        odd = make_risk(3, 3)
        odd.probability = 7
        odd.impact = 0
        heatmap = risk.build_heatmap([odd])
        assert heatmap["matrix"][4][0] == 1

    def test_empty_register(self):
        heatmap = risk.build_heatmap([])
        assert heatmap["matrix"] == [[0] * 5 for _ in range(5)]
        assert heatmap["high_risks"] == 0


class TestProjectRiskScore:
    """Tests for the priority-weighted project score."""

    def test_weighted_average(self, make_risk):
        risks = [make_risk(5, 5), make_risk(2, 2)]
        # (25 * 4 + 4 * 1) / (4 + 1)
        assert risk.calculate_project_risk_score(risks) == 20.8

    def test_closed_risks_are_ignored(self, make_risk):
        risks = [make_risk(2, 2), make_risk(5, 5, status="resolved")]
        assert risk.calculate_project_risk_score(risks) == 4.0

    def test_no_active_risks(self, make_risk):
        assert risk.calculate_project_risk_score([make_risk(status="accepted")]) == 0.0


class TestSummary:
    """Tests for the risk register summary."""

    def test_summary_fields(self, make_risk):
        overdue = make_risk(4, 5, title="Overdue", next_review_date=date(2026, 2, 1))
        later = make_risk(2, 2, category="cost", next_review_date=date(2026, 6, 1))
        done = make_risk(3, 3, status="resolved", next_review_date=date(2026, 1, 1))

        summary = risk.summarize([overdue, later, done], today=date(2026, 3, 1))

        assert summary["total_count"] == 3
        assert summary["active_count"] == 2
        assert summary["by_category"]["technical"] == 2
        assert summary["by_category"]["cost"] == 1
        assert summary["by_category"]["scope"] == 0
        assert summary["by_priority"] == {"critical": 1, "high": 0, "medium": 1, "low": 1}
        assert summary["top_risks"] == [overdue.id, later.id]
        assert summary["needs_review"] == [overdue.id]

    def test_top_risks_limit(self, make_risk):
        risks = [make_risk(p, 1) for p in range(1, 6)] * 2
        assert len(risk.top_risks(risks)) == 5


class TestChangeTracking:
    """Tests for risk history entries."""

    def test_only_changed_tracked_fields_are_recorded(self, make_risk):
        r = make_risk(3, 3)
        entries = risk.track_changes(
            r, {"probability": 4, "impact": 3, "title": "Renamed"}, "alice"
        )

        assert len(entries) == 1
        assert entries[0]["action"] == "probability_changed"
        assert entries[0]["old_value"] == 3
        assert entries[0]["new_value"] == 4
        assert entries[0]["user"] == "alice"

    def test_status_change(self, make_risk):
        r = make_risk()
        entries = risk.track_changes(r, {"status": "mitigating"}, "bob")
        assert entries[0]["action"] == "status_changed"

    def test_creation_and_mitigation_entries(self):
        assert risk.creation_entry("Outage", "carol")["action"] == "created"
        entry = risk.mitigation_entry("Add failover", "carol")
        assert entry["action"] == "mitigation_added"
        assert "Add failover" in entry["description"]
