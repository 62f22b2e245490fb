"""Tests for baseline comparison and requirement traceability routes."""

from __future__ import annotations

import uuid

import pytest

from pmo.analytics.baseline import snapshot_project
from pmo.models.db import ProjectBaseline, Requirement


@pytest.fixture
def kickoff(sample_project, sample_tasks):
    """A baseline taken when only the design task existed."""
    return ProjectBaseline(
        id=uuid.uuid4(),
        project_id=sample_project.id,
        name="Kick-off",
        snapshot=snapshot_project(sample_project, sample_tasks[:1]),
    )


class TestBaselineRoutes:
    def test_compare_as_markdown(
        self, client, mock_session, make_result, sample_project, sample_tasks, kickoff
    ):
        mock_session.execute.side_effect = [
            make_result(one=sample_project),
            make_result(one=kickoff),
            make_result(many=sample_tasks),
        ]

        response = client.get(
            f"/api/projects/{sample_project.id}/baselines/{kickoff.id}/compare",
            params={"format": "markdown"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/markdown")
        assert response.text.startswith("# Baseline comparison: Kick-off")
        assert "| Tasks | 1 | 2 | +1 |" in response.text

    def test_baseline_of_another_project_is_404(
        self, client, mock_session, make_result, sample_project, kickoff
    ):
        kickoff.project_id = uuid.uuid4()
        mock_session.execute.side_effect = [
            make_result(one=sample_project),
            make_result(one=kickoff),
        ]

        response = client.post(
            f"/api/projects/{sample_project.id}/baselines/{kickoff.id}/activate"
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Baseline not found"
        assert sample_project.active_baseline_id is None


class TestGhostTasks:
    def test_unlinked_tasks_are_reported(
        self, client, mock_session, make_result, sample_project, sample_tasks
    ):
        design, build = sample_tasks
        requirement = Requirement(
            id=uuid.uuid4(),
            project_id=sample_project.id,
            title="Conveyor layout",
            related_task_ids=[str(design.id)],
        )
        mock_session.execute.side_effect = [
            make_result(one=sample_project),
            make_result(many=sample_tasks),
            make_result(many=[requirement]),
        ]

        response = client.get(f"/api/pmo/ghost-tasks/{sample_project.id}")

        assert response.status_code == 200
        assert response.json() == [
            {
                "task_id": str(build.id),
                "task_name": "Build",
                "reason": "no_requirement_link",
                "estimated_effort": 400,
            }
        ]
