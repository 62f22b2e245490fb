"""Tests for the projects API routes."""

from __future__ import annotations

import uuid
from datetime import date

import pytest


class TestProjectSchemas:
    """Test Pydantic schema validation for projects."""

    def test_project_create_valid(self):
        from pmo.models.schemas import ProjectCreate

        data = ProjectCreate(
            name="Test Project", start_date=date(2026, 1, 1), end_date=date(2026, 3, 1)
        )
        assert data.name == "Test Project"
        assert data.status == "planning"
        assert data.priority == "P2"

    def test_project_create_requires_name(self):
        from pmo.models.schemas import ProjectCreate

        with pytest.raises(Exception):
            ProjectCreate(name="", start_date=date(2026, 1, 1), end_date=date(2026, 3, 1))

    def test_project_create_rejects_unknown_status(self):
        from pmo.models.schemas import ProjectCreate

        with pytest.raises(Exception):
            ProjectCreate(
                name="X",
                status="cancelled",
                start_date=date(2026, 1, 1),
                end_date=date(2026, 3, 1),
            )

    def test_project_update_partial(self):
        from pmo.models.schemas import ProjectUpdate

        data = ProjectUpdate(name="New Name")
        dump = data.model_dump(exclude_unset=True)
        assert "name" in dump
        assert "description" not in dump


class TestProjectRoutes:
    """Route behaviour against a mocked session."""

    def test_get_missing_project_is_404(self, client, mock_session, make_result):
        mock_session.execute.return_value = make_result(one=None)

        response = client.get(f"/api/projects/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["detail"] == "Project not found"

    def test_get_project(self, client, mock_session, make_result, sample_project):
        sample_project.score = 0.0
        mock_session.execute.return_value = make_result(one=sample_project)

        response = client.get(f"/api/projects/{sample_project.id}")

        assert response.status_code == 200
        assert response.json()["name"] == "Warehouse Automation"

    def test_create_rejects_inverted_dates(self, client, mock_session):
        response = client.post(
            "/api/projects",
            json={"name": "Backwards", "start_date": "2026-03-01", "end_date": "2026-01-01"},
        )

        assert response.status_code == 400
        mock_session.add.assert_not_called()

    def test_invalid_uuid_is_422(self, client):
        response = client.get("/api/projects/not-a-uuid")
        assert response.status_code == 422

    def test_delete_missing_factor_is_404(self, client, mock_session, make_result):
        mock_session.execute.return_value = make_result(one=None)

        response = client.delete(f"/api/factors/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["detail"] == "Factor not found"
