"""ORM tables and API schemas."""

from pmo.models.db import (
    Base,
    ChangeRequest,
    FactorDefinition,
    Project,
    ProjectBaseline,
    ProjectDependency,
    Requirement,
    ResourcePoolItem,
    Risk,
    StageGate,
    Task,
    TeamMember,
    User,
)

__all__ = [
    "Base",
    "ChangeRequest",
    "FactorDefinition",
    "Project",
    "ProjectBaseline",
    "ProjectDependency",
    "Requirement",
    "ResourcePoolItem",
    "Risk",
    "StageGate",
    "Task",
    "TeamMember",
    "User",
]
