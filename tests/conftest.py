"""Shared test fixtures for the PMO test suite."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from pmo.analytics.risk import score_fields
from pmo.models.db import ChangeRequest, Project, Risk, Task

TODAY = date(2026, 3, 1)


@pytest.fixture
def today():
    """A fixed status date so date-dependent metrics are reproducible."""
    return TODAY


@pytest.fixture
def sample_project_id():
    """Return a consistent sample project UUID."""
    return uuid.UUID("12345678-1234-5678-1234-567812345678")


@pytest.fixture
def sample_project(sample_project_id):
    """A 100-day project with a 100k budget, 40k spent."""
    return Project(
        id=sample_project_id,
        name="Warehouse Automation",
        code="WH-1",
        status="active",
        priority="P1",
        start_date=date(2026, 1, 1),
        end_date=date(2026, 4, 11),
        budget=100_000.0,
        actual_cost=40_000.0,
        factors={},
        current_stage="initiation",
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        updated_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def make_task(sample_project_id):
    """Factory for transient tasks."""

    def _make(name="Task", start=date(2026, 1, 1), end=date(2026, 1, 11), progress=0,
              status="planning", project_id=None, parent_id=None):
        return Task(
            id=uuid.uuid4(),
            project_id=project_id or sample_project_id,
            parent_id=parent_id,
            name=name,
            status=status,
            priority="P2",
            type="task",
            start_date=start,
            end_date=end,
            progress=progress,
            dependencies=[],
        )

    return _make


@pytest.fixture
def sample_tasks(make_task):
    """Two 50-day tasks: the first finished, the second untouched."""
    return [
        make_task("Design", date(2026, 1, 1), date(2026, 2, 20), 100, "completed"),
        make_task("Build", date(2026, 2, 20), date(2026, 4, 11), 0, "planning"),
    ]


@pytest.fixture
def make_risk(sample_project_id):
    """Factory for transient risks with derived score and priority."""

    def _make(probability=3, impact=3, category="technical", status="identified",
              title="Risk", next_review_date=None):
        return Risk(
            id=uuid.uuid4(),
            project_id=sample_project_id,
            title=title,
            category=category,
            status=status,
            probability=probability,
            impact=impact,
            identified_date=date(2026, 1, 1),
            next_review_date=next_review_date,
            mitigation_actions=[],
            history=[],
            **score_fields(probability, impact),
        )

    return _make


@pytest.fixture
def make_change_request(sample_project_id):
    """Factory for transient change requests."""

    def _make(status="pending", cost=0.0, delay=0, justification="x" * 30):
        return ChangeRequest(
            id=uuid.uuid4(),
            project_id=sample_project_id,
            title="Change",
            status=status,
            category="scope",
            impact_level="medium",
            estimated_effort_hours=0.0,
            estimated_cost_increase=cost,
            schedule_impact_days=delay,
            business_justification=justification,
            created_at=datetime(2026, 2, 1, tzinfo=timezone.utc),
        )

    return _make


# ── API ───────────────────────────────────────────────────────────────────────


@pytest.fixture
def mock_session():
    """An AsyncSession stand-in; tests set ``execute.return_value``."""
    session = AsyncMock()
    session.add = MagicMock()
    session.add_all = MagicMock()
    session.begin_nested = MagicMock()
    return session


@pytest.fixture
def make_result():
    """Factory for mock ``session.execute`` results."""

    def _make(one=None, many=None):
        result = MagicMock()
        result.scalar_one_or_none.return_value = one
        result.scalars.return_value.all.return_value = many or []
        return result

    return _make


@pytest.fixture
def client(mock_session):
    """Test client with lifespan hooks patched and the session overridden."""
    with (
        patch("pmo.db.session.init_db", new_callable=AsyncMock),
        patch("pmo.tasks.workers.start_scheduler"),
        patch("pmo.db.session.close_db", new_callable=AsyncMock),
        patch("pmo.tasks.workers.stop_scheduler"),
    ):
        from pmo.api.deps import get_db
        from pmo.main import app

        async def override_get_db():
            yield mock_session

        app.dependency_overrides[get_db] = override_get_db
        with TestClient(app) as c:
            yield c
        app.dependency_overrides.clear()
