"""SQLAlchemy ORM models for the PMO service."""

import uuid

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import DeclarativeBase, relationship

PROJECT_STATUSES = ("planning", "active", "completed", "on-hold")
PRIORITIES = ("P0", "P1", "P2", "P3")
STAGES = ("initiation", "planning", "execution", "monitoring", "closing")


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class User(Base):
    """A person who owns projects, tasks or risks."""

    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(100), nullable=False, unique=True, index=True)
    name = Column(String(255), default="")
    email = Column(String(255), nullable=True)
    role = Column(
        Enum("admin", "manager", "user", "readonly", "pmo", name="user_role"),
        default="user",
    )
    avatar = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Project(Base):
    """A project in the portfolio."""

    __tablename__ = "projects"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, index=True)
    code = Column(String(50), nullable=True)
    description = Column(Text, default="")
    status = Column(Enum(*PROJECT_STATUSES, name="project_status"), default="planning")
    priority = Column(Enum(*PRIORITIES, name="priority_level"), default="P2")
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    budget = Column(Float, default=0.0)
    actual_cost = Column(Float, default=0.0)
    factors = Column(JSONB, default=dict)        # factor definition id -> 0..100
    score = Column(Float, default=0.0)
    rank = Column(Integer, nullable=True)
    current_stage = Column(Enum(*STAGES, name="project_stage"), default="initiation")
    active_baseline_id = Column(UUID(as_uuid=True), nullable=True)
    manager_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    tasks = relationship("Task", back_populates="project", cascade="all, delete-orphan")
    risks = relationship("Risk", back_populates="project", cascade="all, delete-orphan")
    change_requests = relationship(
        "ChangeRequest", back_populates="project", cascade="all, delete-orphan"
    )
    gates = relationship(
        "StageGate",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="StageGate.position",
    )
    baselines = relationship(
        "ProjectBaseline", back_populates="project", cascade="all, delete-orphan"
    )
    requirements = relationship(
        "Requirement", back_populates="project", cascade="all, delete-orphan"
    )


class Task(Base):
    """A schedule item (task, milestone or group) inside a project."""

    __tablename__ = "tasks"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(UUID(as_uuid=True), ForeignKey("projects.id"), nullable=False)
    parent_id = Column(UUID(as_uuid=True), ForeignKey("tasks.id"), nullable=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, default="")
    status = Column(Enum(*PROJECT_STATUSES, name="task_status"), default="planning")
    priority = Column(Enum(*PRIORITIES, name="task_priority"), default="P2")
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    progress = Column(Integer, default=0)
    type = Column(Enum("task", "milestone", "group", name="task_type"), default="task")
    assignee_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    dependencies = Column(JSONB, default=list)   # predecessor task ids
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    project = relationship("Project", back_populates="tasks")


class Risk(Base):
    """A project risk scored on a 5x5 probability/impact grid."""

    __tablename__ = "risks"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(UUID(as_uuid=True), ForeignKey("projects.id"), nullable=False)
    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, default="")
    category = Column(
        Enum(
            "schedule", "cost", "resource", "technical", "external", "quality", "scope",
            name="risk_category",
        ),
        nullable=False,
    )
    status = Column(
        Enum(
            "identified", "analyzing", "mitigating", "monitoring", "resolved", "accepted",
            name="risk_status",
        ),
        default="identified",
    )
    probability = Column(Integer, nullable=False)
    impact = Column(Integer, nullable=False)
    risk_score = Column(Integer, nullable=False, index=True)
    priority = Column(
        Enum("critical", "high", "medium", "low", name="risk_priority"), nullable=False
    )
    mitigation_strategy = Column(Text, default="")
    mitigation_actions = Column(JSONB, default=list)
    history = Column(JSONB, default=list)
    identified_date = Column(Date, nullable=False)
    resolved_date = Column(Date, nullable=True)
    next_review_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    project = relationship("Project", back_populates="risks")


class ChangeRequest(Base):
    """A request to change scope, schedule, budget or resources."""

    __tablename__ = "change_requests"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(UUID(as_uuid=True), ForeignKey("projects.id"), nullable=False)
    title = Column(String(500), nullable=False)
    description = Column(Text, default="")
    category = Column(String(50), default="scope")
    status = Column(
        Enum(
            "draft", "pending", "approved", "rejected", "implemented",
            name="change_request_status",
        ),
        default="pending",
    )
    impact_level = Column(
        Enum("low", "medium", "high", "critical", name="change_impact_level"),
        default="medium",
    )
    estimated_effort_hours = Column(Float, default=0.0)
    estimated_cost_increase = Column(Float, default=0.0)
    schedule_impact_days = Column(Integer, default=0)
    business_justification = Column(Text, default="")
    requested_by = Column(String(255), default="")
    approved_by = Column(String(255), nullable=True)
    approval_date = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    project = relationship("Project", back_populates="change_requests")


class StageGate(Base):
    """An approval gate at the end of a project stage."""

    __tablename__ = "stage_gates"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(UUID(as_uuid=True), ForeignKey("projects.id"), nullable=False)
    stage = Column(Enum(*STAGES, name="gate_stage"), nullable=False)
    position = Column(Integer, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, default="")
    requirements = Column(JSONB, default=list)
    status = Column(
        Enum("pending", "requested", "approved", "rejected", "conditional", name="gate_status"),
        default="pending",
    )
    approved_by = Column(String(255), nullable=True)
    approval_date = Column(DateTime(timezone=True), nullable=True)
    comments = Column(Text, nullable=True)
    conditions = Column(JSONB, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    project = relationship("Project", back_populates="gates")


class ProjectBaseline(Base):
    """A frozen snapshot of a project's schedule, budget and tasks."""

    __tablename__ = "project_baselines"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(UUID(as_uuid=True), ForeignKey("projects.id"), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, default="")
    created_by = Column(String(255), default="")
    snapshot = Column(JSONB, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    project = relationship("Project", back_populates="baselines")


class Requirement(Base):
    """A requirement traced to the tasks that implement it."""

    __tablename__ = "requirements"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(UUID(as_uuid=True), ForeignKey("projects.id"), nullable=False)
    title = Column(String(500), nullable=False)
    description = Column(Text, default="")
    type = Column(String(50), default="functional")
    priority = Column(Enum(*PRIORITIES, name="requirement_priority"), default="P2")
    status = Column(String(50), default="draft")
    related_task_ids = Column(JSONB, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    project = relationship("Project", back_populates="requirements")


class ResourcePoolItem(Base):
    """A pool of people or equipment that projects draw on."""

    __tablename__ = "resource_pool"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    department = Column(String(255), nullable=True)
    category = Column(String(50), default="other")
    total_quantity = Column(Integer, default=0)
    cost_per_unit = Column(Float, nullable=True)
    hourly_rate = Column(Float, nullable=True)
    skills = Column(JSONB, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    members = relationship(
        "TeamMember",
        back_populates="resource",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class TeamMember(Base):
    """A named member of a resource pool."""

    __tablename__ = "team_members"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    resource_id = Column(UUID(as_uuid=True), ForeignKey("resource_pool.id"), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(String(255), default="")
    email = Column(String(255), nullable=True)
    skills = Column(JSONB, default=list)
    availability = Column(Float, default=100.0)   # percent
    hourly_rate = Column(Float, nullable=True)
    assignments = Column(JSONB, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    resource = relationship("ResourcePoolItem", back_populates="members")


class FactorDefinition(Base):
    """A weighted scoring factor used to rank the portfolio."""

    __tablename__ = "factor_definitions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, unique=True)
    weight = Column(Float, nullable=False)   # 0..100
    description = Column(Text, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class ProjectDependency(Base):
    """A directed dependency between two projects."""

    __tablename__ = "project_dependencies"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    from_project_id = Column(UUID(as_uuid=True), ForeignKey("projects.id"), nullable=False)
    to_project_id = Column(UUID(as_uuid=True), ForeignKey("projects.id"), nullable=False)
    dependency_type = Column(
        Enum("blocks", "requires", "related", name="dependency_type"), default="blocks"
    )
    criticality = Column(
        Enum("low", "medium", "high", "critical", name="dependency_criticality"),
        default="medium",
    )
    description = Column(Text, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
