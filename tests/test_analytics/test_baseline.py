"""Tests for baseline snapshots, comparison and trend analysis."""

from __future__ import annotations

import math
import uuid
from datetime import date, datetime, timedelta, timezone

import pytest

from pmo.analytics import baseline as baseline_analytics
from pmo.analytics.baseline import TaskSnapshot
from pmo.models.db import ProjectBaseline


def make_baseline(project, tasks, name="Plan", created_at=None):
    return ProjectBaseline(
        id=uuid.uuid4(),
        project_id=project.id,
        name=name,
        snapshot=baseline_analytics.snapshot_project(project, tasks),
        created_at=created_at or datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


class TestSnapshot:
    def test_snapshot_is_plain_json(self, sample_project, sample_tasks):
        snapshot = baseline_analytics.snapshot_project(sample_project, sample_tasks)

        assert snapshot["start_date"] == "2026-01-01"
        assert snapshot["end_date"] == "2026-04-11"
        assert snapshot["budget"] == 100_000.0
        assert len(snapshot["tasks"]) == 2
        assert snapshot["tasks"][0]["id"] == str(sample_tasks[0].id)

    def test_snapshot_tasks_restore_dates(self, sample_project, sample_tasks):
        snapshot = baseline_analytics.snapshot_project(sample_project, sample_tasks)
        restored = baseline_analytics.snapshot_tasks(snapshot)

        assert all(isinstance(t, TaskSnapshot) for t in restored)
        assert restored[1].start_date == date(2026, 2, 20)
        assert restored[0].progress == 100

    def test_missing_tasks_key(self):
        assert baseline_analytics.snapshot_tasks({}) == []


class TestCompare:
    """The baseline holds only the Design task; Build was added later."""

    def test_variances(self, sample_project, sample_tasks):
        baseline = make_baseline(sample_project, sample_tasks[:1])
        result = baseline_analytics.compare_with_baseline(sample_project, sample_tasks, baseline)

        assert result["baseline_name"] == "Plan"
        assert result["variances"] == {
            "task_variance": 1,
            "effort_variance": 400,
            "cost_variance": -60_000.0,
            "schedule_variance_days": 0,
        }

    def test_performance(self, sample_project, sample_tasks):
        baseline = make_baseline(sample_project, sample_tasks[:1])
        perf = baseline_analytics.compare_with_baseline(
            sample_project, sample_tasks, baseline
        )["performance"]

        # Half the tasks done against a planned half: on schedule
        assert perf["spi"] == pytest.approx(1.0)
        assert perf["cpi"] == pytest.approx(1.25)
        assert perf["overall_health"] == "good"

    def test_schedule_slip_is_critical(self, sample_project, sample_tasks):
        baseline = make_baseline(sample_project, sample_tasks)
        sample_project.end_date += timedelta(days=40)
        result = baseline_analytics.compare_with_baseline(sample_project, sample_tasks, baseline)

        assert result["variances"]["schedule_variance_days"] == 40
        assert result["performance"]["overall_health"] == "critical"

    def test_moderate_slip_warns(self, sample_project, sample_tasks):
        baseline = make_baseline(sample_project, sample_tasks)
        sample_project.end_date += timedelta(days=20)
        result = baseline_analytics.compare_with_baseline(sample_project, sample_tasks, baseline)
        assert result["performance"]["overall_health"] == "warning"


class TestTrend:
    def test_growth_since_last_baseline_is_degrading(self, sample_project, sample_tasks):
        baselines = [make_baseline(sample_project, sample_tasks[:1])]
        trend = baseline_analytics.analyze_baseline_trend(sample_project, sample_tasks, baselines)

        assert trend["trend"] == "degrading"
        assert len(trend["points"]) == 2
        assert trend["points"][-1]["effort"] == 800

    def test_unchanged_plan_is_stable(self, sample_project, sample_tasks):
        baselines = [make_baseline(sample_project, sample_tasks)]
        trend = baseline_analytics.analyze_baseline_trend(sample_project, sample_tasks, baselines)
        assert trend["trend"] == "stable"

    def test_shrinking_plan_is_improving(self, sample_project, sample_tasks, make_task):
        extra = make_task("Extra", date(2026, 4, 1), date(2026, 5, 1))
        baselines = [make_baseline(sample_project, [*sample_tasks, extra])]
        trend = baseline_analytics.analyze_baseline_trend(sample_project, sample_tasks, baselines)
        assert trend["trend"] == "improving"

    def test_points_are_ordered_by_creation(self, sample_project, sample_tasks):
        later = make_baseline(
            sample_project, sample_tasks, "Re-plan",
            datetime(2026, 2, 1, tzinfo=timezone.utc),
        )
        earlier = make_baseline(sample_project, sample_tasks[:1], "Kick-off")
        trend = baseline_analytics.analyze_baseline_trend(
            sample_project, sample_tasks, [later, earlier]
        )
        assert [p["task_count"] for p in trend["points"]] == [1, 2, 2]

    def test_growth_from_nothing(self):
        assert math.isinf(baseline_analytics._growth(0, 5))
        assert baseline_analytics._growth(0, 0) == 0.0
