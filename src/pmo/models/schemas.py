"""Pydantic schemas for API request/response validation."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

Priority = Literal["P0", "P1", "P2", "P3"]
ProjectStatus = Literal["planning", "active", "completed", "on-hold"]
RiskCategory = Literal[
    "schedule", "cost", "resource", "technical", "external", "quality", "scope"
]
RiskStatus = Literal[
    "identified", "analyzing", "mitigating", "monitoring", "resolved", "accepted"
]
ImpactLevel = Literal["low", "medium", "high", "critical"]


# ── Users ─────────────────────────────────────────────────────────────────────


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    name: str = ""
    email: str | None = None
    role: Literal["admin", "manager", "user", "readonly", "pmo"] = "user"
    avatar: str | None = None


class UserUpdate(BaseModel):
    name: str | None = None
    email: str | None = None
    role: Literal["admin", "manager", "user", "readonly", "pmo"] | None = None
    avatar: str | None = None


class UserResponse(BaseModel):
    id: uuid.UUID
    username: str
    name: str | None
    email: str | None
    role: str
    avatar: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


# ── Projects ──────────────────────────────────────────────────────────────────


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str | None = None
    description: str = ""
    status: ProjectStatus = "planning"
    priority: Priority = "P2"
    start_date: date
    end_date: date
    budget: float = Field(0.0, ge=0)
    actual_cost: float = Field(0.0, ge=0)
    factors: dict[str, float] = {}
    manager_id: uuid.UUID | None = None


class ProjectUpdate(BaseModel):
    name: str | None = None
    code: str | None = None
    description: str | None = None
    status: ProjectStatus | None = None
    priority: Priority | None = None
    start_date: date | None = None
    end_date: date | None = None
    budget: float | None = Field(None, ge=0)
    actual_cost: float | None = Field(None, ge=0)
    factors: dict[str, float] | None = None
    manager_id: uuid.UUID | None = None


class ProjectResponse(BaseModel):
    id: uuid.UUID
    name: str
    code: str | None
    description: str | None
    status: str
    priority: str
    start_date: date
    end_date: date
    budget: float | None
    actual_cost: float | None
    factors: dict | None
    score: float | None
    rank: int | None
    current_stage: str | None
    active_baseline_id: uuid.UUID | None
    manager_id: uuid.UUID | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProjectListResponse(BaseModel):
    projects: list[ProjectResponse]
    total: int


class FactorDefinitionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    weight: float = Field(..., ge=0, le=100)
    description: str = ""


class FactorDefinitionResponse(BaseModel):
    id: uuid.UUID
    name: str
    weight: float
    description: str | None

    model_config = {"from_attributes": True}


# ── Tasks ─────────────────────────────────────────────────────────────────────


class TaskCreate(BaseModel):
    project_id: uuid.UUID
    parent_id: uuid.UUID | None = None
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    status: ProjectStatus = "planning"
    priority: Priority = "P2"
    start_date: date
    end_date: date
    progress: int = Field(0, ge=0, le=100)
    type: Literal["task", "milestone", "group"] = "task"
    assignee_id: uuid.UUID | None = None
    dependencies: list[str] = []


class TaskUpdate(BaseModel):
    parent_id: uuid.UUID | None = None
    name: str | None = None
    description: str | None = None
    status: ProjectStatus | None = None
    priority: Priority | None = None
    start_date: date | None = None
    end_date: date | None = None
    progress: int | None = Field(None, ge=0, le=100)
    type: Literal["task", "milestone", "group"] | None = None
    assignee_id: uuid.UUID | None = None
    dependencies: list[str] | None = None


class TaskSyncItem(TaskUpdate):
    """A task from the Gantt view; ids starting with ``temp-`` are new."""

    id: str


class TaskResponse(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    parent_id: uuid.UUID | None
    name: str
    description: str | None
    status: str
    priority: str
    start_date: date
    end_date: date
    progress: int
    type: str
    assignee_id: uuid.UUID | None
    dependencies: list | None

    model_config = {"from_attributes": True}


class TaskTreeNode(TaskResponse):
    children: list[TaskTreeNode] = []


TaskTreeNode.model_rebuild()


# ── Risks ─────────────────────────────────────────────────────────────────────


class RiskCreate(BaseModel):
    project_id: uuid.UUID
    owner_id: uuid.UUID | None = None
    title: str = Field(..., min_length=1, max_length=500)
    description: str = ""
    category: RiskCategory
    status: RiskStatus = "identified"
    probability: int = Field(..., ge=1, le=5)
    impact: int = Field(..., ge=1, le=5)
    mitigation_strategy: str = ""
    identified_date: date | None = None
    next_review_date: date | None = None


class RiskUpdate(BaseModel):
    owner_id: uuid.UUID | None = None
    title: str | None = None
    description: str | None = None
    category: RiskCategory | None = None
    status: RiskStatus | None = None
    probability: int | None = Field(None, ge=1, le=5)
    impact: int | None = Field(None, ge=1, le=5)
    mitigation_strategy: str | None = None
    resolved_date: date | None = None
    next_review_date: date | None = None

    @field_validator("title", "category", "status", "probability", "impact")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class MitigationActionCreate(BaseModel):
    description: str = Field(..., min_length=1)
    owner: str = ""
    due_date: date | None = None
    status: Literal["planned", "in_progress", "completed"] = "planned"


class RiskResponse(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    owner_id: uuid.UUID | None
    title: str
    description: str | None
    category: str
    status: str
    probability: int
    impact: int
    risk_score: int
    priority: str
    mitigation_strategy: str | None
    mitigation_actions: list | None
    history: list | None
    identified_date: date
    resolved_date: date | None
    next_review_date: date | None

    model_config = {"from_attributes": True}


class RiskHeatmapResponse(BaseModel):
    project_id: uuid.UUID
    matrix: list[list[int]]
    total_count: int
    high_risks: int


class RiskSummaryResponse(BaseModel):
    project_id: uuid.UUID
    total_count: int
    active_count: int
    project_risk_score: float
    by_category: dict[str, int]
    by_priority: dict[str, int]
    top_risks: list[uuid.UUID]
    needs_review: list[uuid.UUID]


# ── Change Requests ───────────────────────────────────────────────────────────


class ChangeRequestCreate(BaseModel):
    project_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=500)
    description: str = ""
    category: Literal[
        "scope", "schedule", "budget", "resource", "quality", "project_status"
    ] = "scope"
    impact_level: ImpactLevel = "medium"
    estimated_effort_hours: float = Field(0.0, ge=0)
    estimated_cost_increase: float = 0.0
    schedule_impact_days: int = 0
    business_justification: str = ""
    requested_by: str = ""


class ChangeRequestDecision(BaseModel):
    decided_by: str = Field(..., min_length=1)
    reason: str | None = None


class ChangeRequestResponse(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    title: str
    description: str | None
    category: str
    status: str
    impact_level: str
    estimated_effort_hours: float
    estimated_cost_increase: float
    schedule_impact_days: int
    business_justification: str | None
    requested_by: str | None
    approved_by: str | None
    approval_date: datetime | None
    rejection_reason: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class ValidationResult(BaseModel):
    is_valid: bool
    warnings: list[str]
    errors: list[str]


# ── Stage Gates ───────────────────────────────────────────────────────────────


class GateRequirement(BaseModel):
    id: str
    description: str
    required: bool = True
    completed: bool = False
    completed_date: str | None = None
    completed_by: str | None = None
    evidence: str | None = None


class StageGateResponse(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    stage: str
    position: int
    name: str
    description: str | None
    requirements: list[GateRequirement]
    status: str
    approved_by: str | None
    approval_date: datetime | None
    comments: str | None
    conditions: list[str] | None
    completion_percentage: int = 0
    can_approve: bool = False

    model_config = {"from_attributes": True}


class GateApproval(BaseModel):
    approver: str = Field(..., min_length=1)
    comments: str | None = None
    conditions: list[str] = []


class GateRejection(BaseModel):
    approver: str = Field(..., min_length=1)
    comments: str = Field(..., min_length=1)


class RequirementToggle(BaseModel):
    completed: bool
    user: str | None = None
    evidence: str | None = None


# ── Baselines & Requirements ──────────────────────────────────────────────────


class BaselineCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    created_by: str = ""
    activate: bool = True


class BaselineResponse(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    name: str
    description: str | None
    created_by: str | None
    snapshot: dict
    created_at: datetime

    model_config = {"from_attributes": True}


class RequirementCreate(BaseModel):
    project_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=500)
    description: str = ""
    type: Literal["functional", "non-functional", "business", "technical"] = "functional"
    priority: Priority = "P2"
    status: str = "draft"
    related_task_ids: list[str] = []


class RequirementResponse(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    title: str
    description: str | None
    type: str
    priority: str
    status: str
    related_task_ids: list[str] | None

    model_config = {"from_attributes": True}


# ── Resources ─────────────────────────────────────────────────────────────────


class TeamMemberCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    role: str = ""
    email: str | None = None
    skills: list[str] = []
    availability: float = Field(100.0, ge=0, le=100)
    hourly_rate: float | None = None
    assignments: list[dict] = []


class TeamMemberUpdate(BaseModel):
    name: str | None = None
    role: str | None = None
    email: str | None = None
    skills: list[str] | None = None
    availability: float | None = Field(None, ge=0, le=100)
    hourly_rate: float | None = None
    assignments: list[dict] | None = None


class TeamMemberResponse(BaseModel):
    id: uuid.UUID
    resource_id: uuid.UUID
    name: str
    role: str | None
    email: str | None
    skills: list[str] | None
    availability: float | None
    hourly_rate: float | None
    assignments: list[dict] | None

    model_config = {"from_attributes": True}


class ResourceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    department: str | None = None
    category: Literal[
        "frontend", "backend", "design", "testing", "hardware", "management", "other"
    ] = "other"
    total_quantity: int = Field(0, ge=0)
    cost_per_unit: float | None = None
    hourly_rate: float | None = None
    skills: list[dict] = []


class ResourceUpdate(BaseModel):
    name: str | None = None
    department: str | None = None
    category: str | None = None
    total_quantity: int | None = Field(None, ge=0)
    cost_per_unit: float | None = None
    hourly_rate: float | None = None
    skills: list[dict] | None = None


class ResourceResponse(BaseModel):
    id: uuid.UUID
    name: str
    department: str | None
    category: str | None
    total_quantity: int
    cost_per_unit: float | None
    hourly_rate: float | None
    skills: list[dict] | None
    members: list[TeamMemberResponse] = []

    model_config = {"from_attributes": True}


# ── Dependencies ──────────────────────────────────────────────────────────────


class DependencyCreate(BaseModel):
    from_project_id: uuid.UUID
    to_project_id: uuid.UUID
    dependency_type: Literal["blocks", "requires", "related"] = "blocks"
    criticality: ImpactLevel = "medium"
    description: str = ""


class DependencyResponse(BaseModel):
    id: uuid.UUID
    from_project_id: uuid.UUID
    to_project_id: uuid.UUID
    dependency_type: str
    criticality: str
    description: str | None

    model_config = {"from_attributes": True}


class DependencyImpact(BaseModel):
    affected_project_id: uuid.UUID
    affected_project_name: str
    delay_days: int
    risk_level: str
    recommendation: str
    should_suspend: bool = False
    waiting_cost: float = 0.0
    estimated_savings: float = 0.0


class CriticalPathResponse(BaseModel):
    path: list[str]
    project_names: list[str]
    total_duration_days: int


# ── Analytics ─────────────────────────────────────────────────────────────────


class EVMStatus(BaseModel):
    schedule: str
    cost: str


class EVMResponse(BaseModel):
    project_id: uuid.UUID
    as_of: date
    bac: float
    pv: float
    ev: float
    ac: float
    sv: float
    cv: float
    spi: float
    cpi: float
    eac: float
    etc: float
    vac: float
    tcpi: float
    status: EVMStatus


class ScopeCreepResponse(BaseModel):
    project_id: uuid.UUID
    project_name: str
    baseline_effort_hours: int
    current_effort_hours: int
    creep_percentage: float
    threshold: float
    total_change_requests: int
    approved_changes: int
    rejected_changes: int
    pending_changes: int
    is_over_threshold: bool
    requires_rebaseline: bool
    calculated_at: datetime
    warning: str | None = None


class GhostTask(BaseModel):
    task_id: uuid.UUID
    task_name: str
    reason: str
    estimated_effort: int
