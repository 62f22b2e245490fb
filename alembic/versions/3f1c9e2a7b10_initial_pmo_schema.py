"""initial pmo schema

Revision ID: 3f1c9e2a7b10
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f1c9e2a7b10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PROJECT_STATUSES = ("planning", "active", "completed", "on-hold")
PRIORITIES = ("P0", "P1", "P2", "P3")
STAGES = ("initiation", "planning", "execution", "monitoring", "closing")

ENUM_NAMES = (
    "user_role",
    "project_status",
    "priority_level",
    "project_stage",
    "task_status",
    "task_priority",
    "task_type",
    "risk_category",
    "risk_status",
    "risk_priority",
    "change_request_status",
    "change_impact_level",
    "gate_stage",
    "gate_status",
    "requirement_priority",
    "dependency_type",
    "dependency_criticality",
)


def _uuid_pk() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True)


def _timestamps(updated: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        )
    ]
    if updated:
        columns.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                server_default=sa.func.now(),
            )
        )
    return columns


def _fk(column: str, target: str, nullable: bool = True) -> sa.Column:
    return sa.Column(
        column,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey(target),
        nullable=nullable,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=255)),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column(
            "role",
            sa.Enum("admin", "manager", "user", "readonly", "pmo", name="user_role"),
        ),
        sa.Column("avatar", sa.String(length=500), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "projects",
        _uuid_pk(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=True),
        sa.Column("description", sa.Text()),
        sa.Column("status", sa.Enum(*PROJECT_STATUSES, name="project_status")),
        sa.Column("priority", sa.Enum(*PRIORITIES, name="priority_level")),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("budget", sa.Float()),
        sa.Column("actual_cost", sa.Float()),
        sa.Column("factors", postgresql.JSONB()),
        sa.Column("score", sa.Float()),
        sa.Column("rank", sa.Integer(), nullable=True),
        sa.Column("current_stage", sa.Enum(*STAGES, name="project_stage")),
        sa.Column("active_baseline_id", postgresql.UUID(as_uuid=True), nullable=True),
        _fk("manager_id", "users.id"),
        *_timestamps(),
    )
    op.create_index("ix_projects_name", "projects", ["name"])

    op.create_table(
        "tasks",
        _uuid_pk(),
        _fk("project_id", "projects.id", nullable=False),
        _fk("parent_id", "tasks.id"),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("status", sa.Enum(*PROJECT_STATUSES, name="task_status")),
        sa.Column("priority", sa.Enum(*PRIORITIES, name="task_priority")),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("progress", sa.Integer()),
        sa.Column("type", sa.Enum("task", "milestone", "group", name="task_type")),
        _fk("assignee_id", "users.id"),
        sa.Column("dependencies", postgresql.JSONB()),
        *_timestamps(),
    )

    op.create_table(
        "risks",
        _uuid_pk(),
        _fk("project_id", "projects.id", nullable=False),
        _fk("owner_id", "users.id"),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column(
            "category",
            sa.Enum(
                "schedule", "cost", "resource", "technical", "external", "quality", "scope",
                name="risk_category",
            ),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum(
                "identified", "analyzing", "mitigating", "monitoring", "resolved", "accepted",
                name="risk_status",
            ),
        ),
        sa.Column("probability", sa.Integer(), nullable=False),
        sa.Column("impact", sa.Integer(), nullable=False),
        sa.Column("risk_score", sa.Integer(), nullable=False),
        sa.Column(
            "priority",
            sa.Enum("critical", "high", "medium", "low", name="risk_priority"),
            nullable=False,
        ),
        sa.Column("mitigation_strategy", sa.Text()),
        sa.Column("mitigation_actions", postgresql.JSONB()),
        sa.Column("history", postgresql.JSONB()),
        sa.Column("identified_date", sa.Date(), nullable=False),
        sa.Column("resolved_date", sa.Date(), nullable=True),
        sa.Column("next_review_date", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_risks_risk_score", "risks", ["risk_score"])

    op.create_table(
        "change_requests",
        _uuid_pk(),
        _fk("project_id", "projects.id", nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("category", sa.String(length=50)),
        sa.Column(
            "status",
            sa.Enum(
                "draft", "pending", "approved", "rejected", "implemented",
                name="change_request_status",
            ),
        ),
        sa.Column(
            "impact_level",
            sa.Enum("low", "medium", "high", "critical", name="change_impact_level"),
        ),
        sa.Column("estimated_effort_hours", sa.Float()),
        sa.Column("estimated_cost_increase", sa.Float()),
        sa.Column("schedule_impact_days", sa.Integer()),
        sa.Column("business_justification", sa.Text()),
        sa.Column("requested_by", sa.String(length=255)),
        sa.Column("approved_by", sa.String(length=255), nullable=True),
        sa.Column("approval_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "stage_gates",
        _uuid_pk(),
        _fk("project_id", "projects.id", nullable=False),
        sa.Column("stage", sa.Enum(*STAGES, name="gate_stage"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("requirements", postgresql.JSONB()),
        sa.Column(
            "status",
            sa.Enum(
                "pending", "requested", "approved", "rejected", "conditional",
                name="gate_status",
            ),
        ),
        sa.Column("approved_by", sa.String(length=255), nullable=True),
        sa.Column("approval_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("conditions", postgresql.JSONB()),
        *_timestamps(),
    )

    op.create_table(
        "project_baselines",
        _uuid_pk(),
        _fk("project_id", "projects.id", nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("created_by", sa.String(length=255)),
        sa.Column("snapshot", postgresql.JSONB(), nullable=False),
        *_timestamps(updated=False),
    )

    op.create_table(
        "requirements",
        _uuid_pk(),
        _fk("project_id", "projects.id", nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("type", sa.String(length=50)),
        sa.Column("priority", sa.Enum(*PRIORITIES, name="requirement_priority")),
        sa.Column("status", sa.String(length=50)),
        sa.Column("related_task_ids", postgresql.JSONB()),
        *_timestamps(),
    )

    op.create_table(
        "resource_pool",
        _uuid_pk(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("department", sa.String(length=255), nullable=True),
        sa.Column("category", sa.String(length=50)),
        sa.Column("total_quantity", sa.Integer()),
        sa.Column("cost_per_unit", sa.Float(), nullable=True),
        sa.Column("hourly_rate", sa.Float(), nullable=True),
        sa.Column("skills", postgresql.JSONB()),
        *_timestamps(),
    )

    op.create_table(
        "team_members",
        _uuid_pk(),
        _fk("resource_id", "resource_pool.id", nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=255)),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("skills", postgresql.JSONB()),
        sa.Column("availability", sa.Float()),
        sa.Column("hourly_rate", sa.Float(), nullable=True),
        sa.Column("assignments", postgresql.JSONB()),
        *_timestamps(updated=False),
    )

    op.create_table(
        "factor_definitions",
        _uuid_pk(),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        sa.Column("weight", sa.Float(), nullable=False),
        sa.Column("description", sa.Text()),
        *_timestamps(updated=False),
    )

    op.create_table(
        "project_dependencies",
        _uuid_pk(),
        _fk("from_project_id", "projects.id", nullable=False),
        _fk("to_project_id", "projects.id", nullable=False),
        sa.Column(
            "dependency_type",
            sa.Enum("blocks", "requires", "related", name="dependency_type"),
        ),
        sa.Column(
            "criticality",
            sa.Enum("low", "medium", "high", "critical", name="dependency_criticality"),
        ),
        sa.Column("description", sa.Text()),
        *_timestamps(updated=False),
    )


def downgrade() -> None:
    # Children first so foreign keys never dangle
    for table in (
        "project_dependencies",
        "factor_definitions",
        "team_members",
        "resource_pool",
        "requirements",
        "project_baselines",
        "stage_gates",
        "change_requests",
        "risks",
        "tasks",
        "projects",
        "users",
    ):
        op.drop_table(table)

    for name in ENUM_NAMES:
        sa.Enum(name=name).drop(op.get_bind(), checkfirst=True)
