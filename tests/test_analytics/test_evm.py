"""Tests for earned value metrics and cost forecasting."""

from __future__ import annotations

from datetime import date

import pytest

from pmo.analytics.evm import calculate_evm, forecast_cost


class TestCalculateEVM:
    """Budget is spread by task duration; both fixture tasks carry 50k."""

    def test_planned_and_earned_value(self, sample_project, sample_tasks, today):
        m = calculate_evm(sample_project, sample_tasks, today)

        # Design fully elapsed (50k) plus 9 of Build's 50 days (9k)
        assert m["pv"] == pytest.approx(59_000)
        assert m["ev"] == pytest.approx(50_000)
        assert m["ac"] == 40_000
        assert m["sv"] == pytest.approx(-9_000)
        assert m["cv"] == pytest.approx(10_000)

    def test_indices_and_forecasts(self, sample_project, sample_tasks, today):
        m = calculate_evm(sample_project, sample_tasks, today)

        assert m["spi"] == pytest.approx(50 / 59)
        assert m["cpi"] == pytest.approx(1.25)
        assert m["eac"] == pytest.approx(80_000)
        assert m["etc"] == pytest.approx(40_000)
        assert m["vac"] == pytest.approx(20_000)
        assert m["tcpi"] == pytest.approx(50_000 / 60_000)

    def test_status_verdicts(self, sample_project, sample_tasks, today):
        m = calculate_evm(sample_project, sample_tasks, today)
        assert m["status"] == {"schedule": "behind", "cost": "under_budget"}

    def test_no_tasks_returns_neutral_metrics(self, sample_project, today):
        m = calculate_evm(sample_project, [], today)

        assert m["spi"] == 1.0
        assert m["cpi"] == 1.0
        assert m["eac"] == sample_project.budget
        assert m["status"] == {"schedule": "on_track", "cost": "on_track"}

    def test_zero_budget_returns_neutral_metrics(self, sample_project, sample_tasks, today):
        sample_project.budget = 0.0
        m = calculate_evm(sample_project, sample_tasks, today)
        assert m["pv"] == 0.0
        assert m["tcpi"] == 1.0

    def test_before_start_has_no_planned_value(self, sample_project, sample_tasks):
        m = calculate_evm(sample_project, sample_tasks, date(2025, 12, 1))
        assert m["pv"] == 0.0
        assert m["spi"] == 1.0

    def test_no_actual_cost_keeps_cpi_neutral(self, sample_project, sample_tasks, today):
        sample_project.actual_cost = 0.0
        m = calculate_evm(sample_project, sample_tasks, today)
        assert m["cpi"] == 1.0


class TestForecastCost:
    """Tests for the monthly cost forecast."""

    def test_points_run_from_current_month(self, sample_project, sample_tasks, today):
        metrics = calculate_evm(sample_project, sample_tasks, today)
        points = forecast_cost(metrics, months=4)

        assert len(points) == 5
        assert points[0]["month"] == "2026-03"
        assert points[0]["type"] == "current"
        assert points[-1]["month"] == "2026-07"
        assert points[-1]["type"] == "forecast"

    def test_forecast_reaches_eac(self, sample_project, sample_tasks, today):
        metrics = calculate_evm(sample_project, sample_tasks, today)
        points = forecast_cost(metrics, months=4)
        assert points[-1]["ac"] == pytest.approx(metrics["eac"])

    def test_months_roll_over_the_year(self, sample_project, sample_tasks):
        metrics = calculate_evm(sample_project, sample_tasks, date(2026, 11, 15))
        points = forecast_cost(metrics, months=3)
        assert [p["month"] for p in points] == ["2026-11", "2026-12", "2027-01", "2027-02"]

    def test_rejects_non_positive_months(self, sample_project, sample_tasks, today):
        metrics = calculate_evm(sample_project, sample_tasks, today)
        with pytest.raises(ValueError):
            forecast_cost(metrics, months=0)
