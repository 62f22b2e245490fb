"""Tests for the scheduled background jobs."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pmo.models.db import Project
from pmo.tasks import workers


@pytest.fixture
def session_factory(mock_session):
    """Patch the session factory so ``async with`` yields the mock session."""
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = mock_session
    factory.return_value.__aexit__.return_value = False
    with patch("pmo.db.session.async_session_factory", factory):
        yield factory


def _project(name):
    return Project(name=name, status="active")


class TestScopeCheck:
    @pytest.mark.asyncio
    async def test_warns_for_projects_over_threshold(
        self, session_factory, mock_session, make_result, caplog
    ):
        mock_session.execute.return_value = make_result(
            many=[_project("Calm"), _project("Creeping")]
        )
        metrics = [
            {"is_over_threshold": False, "creep_percentage": 2.0},
            {"is_over_threshold": True, "creep_percentage": 35.0},
        ]

        with patch("pmo.services.portfolio.scope_metrics", new=AsyncMock(side_effect=metrics)):
            with caplog.at_level(logging.INFO, logger="pmo.tasks.workers"):
                await workers.run_scope_check()

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "Creeping is 35.0% over" in warnings[0].getMessage()
        assert "1 of 2 projects over threshold" in caplog.text

    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_the_rest(
        self, session_factory, mock_session, make_result, caplog
    ):
        mock_session.execute.return_value = make_result(
            many=[_project("Broken"), _project("Creeping")]
        )
        scope = AsyncMock(
            side_effect=[RuntimeError("boom"), {"is_over_threshold": True, "creep_percentage": 50.0}]
        )

        with patch("pmo.services.portfolio.scope_metrics", new=scope):
            with caplog.at_level(logging.INFO, logger="pmo.tasks.workers"):
                await workers.run_scope_check()

        assert scope.await_count == 2
        assert mock_session.begin_nested.call_count == 2
        exit_args = mock_session.begin_nested.return_value.__aexit__.await_args_list
        assert exit_args[0].args[0] is RuntimeError
        assert exit_args[1].args[0] is None
        assert "Scope check failed for project Broken" in caplog.text
        assert "Creeping is 50.0% over" in caplog.text


class TestScoreSync:
    @pytest.mark.asyncio
    async def test_commits_on_success(self, session_factory, mock_session):
        with patch(
            "pmo.services.portfolio.sync_scores_and_ranks",
            new=AsyncMock(return_value=[_project("A")]),
        ):
            await workers.run_score_sync()

        mock_session.commit.assert_awaited_once()
        mock_session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rolls_back_on_failure(self, session_factory, mock_session):
        with patch(
            "pmo.services.portfolio.sync_scores_and_ranks",
            new=AsyncMock(side_effect=RuntimeError("db down")),
        ):
            await workers.run_score_sync()

        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_awaited()


class TestScheduler:
    @pytest.mark.asyncio
    async def test_start_registers_jobs_once(self):
        try:
            workers.start_scheduler()
            first = workers._scheduler
            workers.start_scheduler()

            assert workers._scheduler is first
            assert {job.id for job in first.get_jobs()} == {
                "score_sync_daily",
                "scope_creep_check",
            }
        finally:
            workers.stop_scheduler()

        assert workers._scheduler is None
