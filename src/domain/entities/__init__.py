"""
Domain Entities Package

This package contains the core domain entities and business logic.
"""

from .demand import ConservatismLevel, DemandResult, PlanningPolicy
from .errors import (
    DegenerateCriticalRatioError,
    DomainError,
    InvalidWorkflowTransitionError,
    PlanningDataError,
    WorkflowNotFoundError,
)
from .health import ApplicationInfo, DependencyStatus, ServiceStatus, SystemHealth
from .plan import Plan, PlanItem
from .planning_data import (
    BudgetRecord,
    BudgetSummary,
    CapacityRecord,
    CostEntry,
    ForecastRecord,
    PlanningContext,
    product_key,
)
from .workflow import (
    AgentRole,
    HumanInput,
    ItemOverride,
    TranscriptMessage,
    WorkflowState,
    WorkflowStatus,
)

__all__ = [
    "AgentRole",
    "ApplicationInfo",
    "BudgetRecord",
    "BudgetSummary",
    "CapacityRecord",
    "ConservatismLevel",
    "CostEntry",
    "DegenerateCriticalRatioError",
    "DemandResult",
    "DependencyStatus",
    "DomainError",
    "ForecastRecord",
    "HumanInput",
    "InvalidWorkflowTransitionError",
    "ItemOverride",
    "Plan",
    "PlanItem",
    "PlanningContext",
    "PlanningDataError",
    "PlanningPolicy",
    "ServiceStatus",
    "SystemHealth",
    "TranscriptMessage",
    "WorkflowNotFoundError",
    "WorkflowState",
    "WorkflowStatus",
    "product_key",
]
