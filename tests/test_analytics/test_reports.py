"""Tests for the Jinja2 markdown reports."""

from __future__ import annotations

import uuid

from pmo.analytics.baseline import compare_with_baseline, snapshot_project
from pmo.analytics.scope import calculate_scope_creep
from pmo.models.db import ProjectBaseline
from pmo.reports import baseline_report, scope_creep_warning


class TestScopeCreepWarning:
    def test_no_warning_under_threshold(self, sample_project, sample_tasks):
        metrics = calculate_scope_creep(sample_project, sample_tasks, [])
        assert scope_creep_warning(metrics) is None

    def test_warning_over_threshold(self, sample_project, sample_tasks, make_change_request):
        metrics = calculate_scope_creep(
            sample_project,
            sample_tasks,
            [make_change_request("approved")],
            baseline_tasks=sample_tasks[:1],
        )
        text = scope_creep_warning(metrics)

        assert "Warehouse Automation" in text
        assert "100.0%" in text
        assert "Added effort: 400 hours" in text
        assert "approved: 1" in text


class TestBaselineReport:
    def test_report_sections(self, sample_project, sample_tasks):
        baseline = ProjectBaseline(
            id=uuid.uuid4(),
            project_id=sample_project.id,
            name="Kick-off",
            snapshot=snapshot_project(sample_project, sample_tasks[:1]),
        )
        report = baseline_report(compare_with_baseline(sample_project, sample_tasks, baseline))

        assert report.startswith("# Baseline comparison: Kick-off")
        assert "| Tasks | 1 | 2 | +1 |" in report
        assert "| Effort | 400h | 800h | +400h |" in report
        assert "**SPI**: 1.00" in report
        assert "**Good**" in report
