"""
DTOs Package - Application Layer

This package contains Data Transfer Objects (DTOs) used for data exchange
between the application layer and the presentation layer.
"""

from .health_dto import ApplicationInfoDTO, DependencyStatusDTO, SystemHealthDTO
from .workflow_dto import (
    BudgetContextDTO,
    DemandResultDTO,
    HumanInputDTO,
    ItemOverrideDTO,
    PlanDTO,
    PlanItemDTO,
    PolicyDTO,
    StartWorkflowRequestDTO,
    TranscriptMessageDTO,
    WorkflowStateDTO,
    WorkflowSummaryDTO,
)

__all__ = [
    "ApplicationInfoDTO",
    "BudgetContextDTO",
    "DemandResultDTO",
    "DependencyStatusDTO",
    "HumanInputDTO",
    "ItemOverrideDTO",
    "PlanDTO",
    "PlanItemDTO",
    "PolicyDTO",
    "StartWorkflowRequestDTO",
    "SystemHealthDTO",
    "TranscriptMessageDTO",
    "WorkflowStateDTO",
    "WorkflowSummaryDTO",
]
