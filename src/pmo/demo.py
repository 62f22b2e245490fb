"""Bundled demo portfolio.

Transient ORM objects (never attached to a session) that the CLI falls
back to when the API is unreachable and ``--demo`` is given. Dates are
laid out relative to *today* so the numbers stay meaningful.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from pmo.analytics.baseline import snapshot_project
from pmo.analytics.risk import score_fields
from pmo.models.db import (
    ChangeRequest,
    FactorDefinition,
    Project,
    ProjectBaseline,
    ProjectDependency,
    Requirement,
    Risk,
    Task,
)


def demo_id(key: str) -> uuid.UUID:
    """Stable UUID for a demo record."""
    return uuid.uuid5(uuid.NAMESPACE_URL, f"pmo-demo/{key}")


@dataclass
class DemoPortfolio:
    projects: list[Project] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    risks: list[Risk] = field(default_factory=list)
    change_requests: list[ChangeRequest] = field(default_factory=list)
    requirements: list[Requirement] = field(default_factory=list)
    baselines: list[ProjectBaseline] = field(default_factory=list)
    dependencies: list[ProjectDependency] = field(default_factory=list)
    factors: list[FactorDefinition] = field(default_factory=list)

    def find_project(self, key: str) -> Project | None:
        """Look a project up by id, code or case-insensitive name."""
        for project in self.projects:
            if key in (str(project.id), project.code) or key.lower() == project.name.lower():
                return project
        return None

    def tasks_for(self, project: Project) -> list[Task]:
        return [t for t in self.tasks if t.project_id == project.id]

    def risks_for(self, project: Project) -> list[Risk]:
        return sorted(
            (r for r in self.risks if r.project_id == project.id),
            key=lambda r: r.risk_score,
            reverse=True,
        )

    def change_requests_for(self, project: Project) -> list[ChangeRequest]:
        return [cr for cr in self.change_requests if cr.project_id == project.id]

    def requirements_for(self, project: Project) -> list[Requirement]:
        return [r for r in self.requirements if r.project_id == project.id]

    def active_baseline(self, project: Project) -> ProjectBaseline | None:
        return next(
            (b for b in self.baselines if b.id == project.active_baseline_id), None
        )


def _task(key, project, name, start, end, progress=0, status="planning", type="task"):
    return Task(
        id=demo_id(key),
        project_id=project.id,
        name=name,
        start_date=start,
        end_date=end,
        progress=progress,
        status=status,
        priority="P2",
        type=type,
        dependencies=[],
    )


def _risk(key, project, title, category, probability, impact, status="identified",
          next_review=None, identified=None):
    return Risk(
        id=demo_id(key),
        project_id=project.id,
        title=title,
        category=category,
        status=status,
        probability=probability,
        impact=impact,
        identified_date=identified,
        next_review_date=next_review,
        mitigation_actions=[],
        history=[],
        **score_fields(probability, impact),
    )


def build_demo_portfolio(today: date | None = None) -> DemoPortfolio:
    """Three projects with tasks, risks, change requests and one baseline."""
    today = today or date.today()

    def day(offset: int) -> date:
        return today + timedelta(days=offset)

    factors = [
        FactorDefinition(id=demo_id("factor/strategic"), name="Strategic fit", weight=50),
        FactorDefinition(id=demo_id("factor/roi"), name="Return on investment", weight=30),
        FactorDefinition(id=demo_id("factor/urgency"), name="Urgency", weight=20),
    ]

    def scores(strategic, roi, urgency):
        return {
            str(factors[0].id): strategic,
            str(factors[1].id): roi,
            str(factors[2].id): urgency,
        }

    migration = Project(
        id=demo_id("project/migration"),
        name="Enterprise Migration",
        code="DEMO-1",
        description="Move the order platform onto the enterprise architecture.",
        status="active",
        priority="P0",
        start_date=day(-60),
        end_date=day(30),
        budget=500_000.0,
        actual_cost=320_000.0,
        factors=scores(90, 70, 80),
        current_stage="execution",
    )
    analytics = Project(
        id=demo_id("project/analytics"),
        name="AI Enhanced Analytics",
        code="DEMO-2",
        description="Decision-support dashboards built on the migrated data.",
        status="planning",
        priority="P1",
        start_date=day(31),
        end_date=day(150),
        budget=300_000.0,
        actual_cost=0.0,
        factors=scores(70, 85, 40),
        current_stage="planning",
    )
    field_app = Project(
        id=demo_id("project/field-app"),
        name="Mobile Field App",
        code="DEMO-3",
        description="Offline-capable app for field technicians.",
        status="active",
        priority="P2",
        start_date=day(-30),
        end_date=day(60),
        budget=150_000.0,
        actual_cost=90_000.0,
        factors=scores(50, 60, 90),
        current_stage="execution",
    )
    projects = [migration, analytics, field_app]

    tasks = [
        _task("task/req", migration, "Requirements analysis", day(-60), day(-40), 100, "completed"),
        _task("task/migrate", migration, "Data migration", day(-40), day(0), 70, "active"),
        _task("task/rehearsal", migration, "Cutover rehearsal", day(0), day(20)),
        _task("task/golive", migration, "Go-live", day(29), day(30), type="milestone"),
        _task("task/prototype", analytics, "Model prototyping", day(31), day(70)),
        _task("task/dashboards", analytics, "Dashboard integration", day(71), day(150)),
        _task("task/api", field_app, "API design", day(-30), day(-10), 100, "completed"),
        _task("task/build", field_app, "App build", day(-10), day(40), 30, "active"),
        _task("task/pilot", field_app, "Pilot rollout", day(40), day(60)),
    ]

    # The field app was baselined with a shorter build and no pilot.
    planned = [
        _task("task/api", field_app, "API design", day(-30), day(-10)),
        _task("task/build", field_app, "App build", day(-10), day(20)),
    ]
    baseline = ProjectBaseline(
        id=demo_id("baseline/field-app"),
        project_id=field_app.id,
        name="Kick-off plan",
        created_by="demo",
        snapshot=snapshot_project(field_app, planned),
        created_at=datetime.combine(day(-30), datetime.min.time(), tzinfo=timezone.utc),
    )
    field_app.active_baseline_id = baseline.id

    risks = [
        _risk("risk/legacy", migration, "Legacy data quality", "technical", 4, 5,
              status="mitigating", next_review=day(-1), identified=day(-50)),
        _risk("risk/vendor", migration, "Vendor cutover window slips", "schedule", 3, 4,
              identified=day(-20)),
        _risk("risk/budget", migration, "Licence costs above estimate", "cost", 2, 3,
              identified=day(-45)),
        _risk("risk/skills", analytics, "No in-house ML engineers", "resource", 3, 3,
              identified=day(-5)),
        _risk("risk/devices", field_app, "Rugged devices delayed", "external", 2, 4,
              status="resolved", identified=day(-25)),
    ]

    change_requests = [
        ChangeRequest(
            id=demo_id("cr/pilot"),
            project_id=field_app.id,
            title="Add pilot rollout phase",
            category="scope",
            status="approved",
            impact_level="high",
            estimated_effort_hours=160.0,
            estimated_cost_increase=20_000.0,
            schedule_impact_days=20,
            business_justification="Regional operations asked for a staged pilot before go-live.",
            requested_by="ops-lead",
        ),
        ChangeRequest(
            id=demo_id("cr/offline-maps"),
            project_id=field_app.id,
            title="Offline maps",
            category="scope",
            status="pending",
            impact_level="medium",
            estimated_effort_hours=80.0,
            estimated_cost_increase=8_000.0,
            schedule_impact_days=0,
            business_justification="Technicians lose signal at remote sites.",
            requested_by="field-team",
        ),
    ]

    requirements = [
        Requirement(
            id=demo_id("req/migrate-orders"),
            project_id=migration.id,
            title="All historical orders are migrated",
            type="functional",
            priority="P0",
            related_task_ids=[str(demo_id("task/migrate")), str(demo_id("task/rehearsal"))],
        ),
        Requirement(
            id=demo_id("req/field-sync"),
            project_id=field_app.id,
            title="Work orders sync when back online",
            type="functional",
            priority="P1",
            related_task_ids=[str(demo_id("task/build"))],
        ),
    ]

    dependencies = [
        ProjectDependency(
            id=demo_id("dep/migration-analytics"),
            from_project_id=migration.id,
            to_project_id=analytics.id,
            dependency_type="blocks",
            criticality="critical",
        ),
        ProjectDependency(
            id=demo_id("dep/migration-field"),
            from_project_id=migration.id,
            to_project_id=field_app.id,
            dependency_type="requires",
            criticality="medium",
        ),
    ]

    return DemoPortfolio(
        projects=projects,
        tasks=tasks,
        risks=risks,
        change_requests=change_requests,
        requirements=requirements,
        baselines=[baseline],
        dependencies=dependencies,
        factors=factors,
    )
