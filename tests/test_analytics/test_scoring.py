"""Tests for weighted-factor scoring and portfolio ranking."""

from __future__ import annotations

import uuid
from datetime import date

import pytest

from pmo.analytics.scoring import calculate_project_score, rank_projects, rescore_portfolio
from pmo.models.db import FactorDefinition, Project


@pytest.fixture
def definitions():
    return [
        FactorDefinition(id=uuid.uuid4(), name="Strategic fit", weight=60),
        FactorDefinition(id=uuid.uuid4(), name="Urgency", weight=40),
    ]


def make_project(name, score=None, factors=None):
    return Project(
        id=uuid.uuid4(),
        name=name,
        start_date=date(2026, 1, 1),
        end_date=date(2026, 6, 1),
        score=score,
        factors=factors or {},
    )


class TestProjectScore:
    def test_weighted_mean(self, definitions):
        factors = {str(definitions[0].id): 80, str(definitions[1].id): 50}
        assert calculate_project_score(factors, definitions) == pytest.approx(68.0)

    def test_unscored_factor_counts_as_zero(self, definitions):
        factors = {str(definitions[0].id): 100}
        assert calculate_project_score(factors, definitions) == pytest.approx(60.0)

    def test_no_factors(self, definitions):
        assert calculate_project_score({}, definitions) == 0.0
        assert calculate_project_score(None, definitions) == 0.0

    def test_no_definitions(self):
        assert calculate_project_score({"anything": 90}, []) == 0.0


class TestRanking:
    def test_rank_by_descending_score(self):
        low, high, unscored = make_project("Low", 10), make_project("High", 50), make_project("New")
        ranked = rank_projects([low, high, unscored])

        assert ranked == [high, low, unscored]
        assert [p.rank for p in ranked] == [1, 2, 3]

    def test_rescore_then_rank(self, definitions):
        a = make_project("A", factors={str(definitions[0].id): 50, str(definitions[1].id): 50})
        b = make_project("B", factors={str(definitions[0].id): 90, str(definitions[1].id): 90})
        manual = make_project("Manual", score=70)

        ranked = rescore_portfolio([a, b, manual], definitions)

        assert [p.name for p in ranked] == ["B", "Manual", "A"]
        assert b.score == pytest.approx(90.0)
        # Projects without factor scores keep their current score
        assert manual.score == 70
