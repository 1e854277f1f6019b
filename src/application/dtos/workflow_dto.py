"""
Application DTOs - Planning Workflow

This module contains Data Transfer Objects (DTOs) for planning workflow
operations. DTOs are used to transfer data between layers and define the
API contracts.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.domain.entities.demand import ConservatismLevel, DemandResult, PlanningPolicy
from src.domain.entities.plan import Plan, PlanItem
from src.domain.entities.workflow import (
    AgentRole,
    HumanInput,
    ItemOverride,
    TranscriptMessage,
    WorkflowState,
    WorkflowStatus,
)


class PolicyDTO(BaseModel):
    """DTO for the planning policy of one run."""

    conservatism_level: ConservatismLevel = Field(
        default=ConservatismLevel.MEDIUM,
        description="How far demand targets are padded above the forecast",
    )
    max_cost: Optional[float] = Field(
        default=None,
        gt=0,
        description="Budget cap for the run; the current budget is used when omitted",
    )

    def to_domain(self) -> PlanningPolicy:
        return PlanningPolicy(
            conservatism_level=self.conservatism_level, max_cost=self.max_cost
        )

    @classmethod
    def from_domain(cls, policy: PlanningPolicy) -> "PolicyDTO":
        return cls(
            conservatism_level=policy.conservatism_level, max_cost=policy.max_cost
        )


class StartWorkflowRequestDTO(BaseModel):
    """DTO for starting a planning workflow."""

    item_ids: List[str] = Field(
        min_length=1,
        description="Composite item ids (client/warehouse/product), in budget priority order",
    )
    policy: PolicyDTO = Field(default_factory=PolicyDTO)

    @field_validator("item_ids")
    @classmethod
    def strip_item_ids(cls, value: List[str]) -> List[str]:
        cleaned = [item_id.strip() for item_id in value if item_id and item_id.strip()]
        if not cleaned:
            raise ValueError("At least one non-empty item id is required")
        return cleaned

    model_config = {
        "json_schema_extra": {
            "example": {
                "item_ids": ["1/11/1001", "1/11/1002"],
                "policy": {"conservatism_level": "medium", "max_cost": 5000},
            }
        }
    }


class ItemOverrideDTO(BaseModel):
    item_id: str
    original_quantity: int = Field(ge=0)
    new_quantity: int = Field(ge=0)
    reason: str = ""


class HumanInputDTO(BaseModel):
    """DTO for reviewer feedback at the review checkpoint."""

    feedback: str = Field(min_length=1, description="Free-text reviewer feedback")
    risk_level: Optional[ConservatismLevel] = None
    budget_adjustment: Optional[float] = None
    item_overrides: List[ItemOverrideDTO] = Field(
        default_factory=list,
        description="Recorded with the workflow; quantities come from the feedback text",
    )

    def to_domain(self) -> HumanInput:
        return HumanInput(
            feedback=self.feedback,
            risk_level=self.risk_level,
            budget_adjustment=self.budget_adjustment,
            item_overrides=tuple(
                ItemOverride(
                    item_id=override.item_id,
                    original_quantity=override.original_quantity,
                    new_quantity=override.new_quantity,
                    reason=override.reason,
                )
                for override in self.item_overrides
            ),
        )

    @classmethod
    def from_domain(cls, human_input: HumanInput) -> "HumanInputDTO":
        return cls(
            feedback=human_input.feedback,
            risk_level=human_input.risk_level,
            budget_adjustment=human_input.budget_adjustment,
            item_overrides=[
                ItemOverrideDTO(
                    item_id=override.item_id,
                    original_quantity=override.original_quantity,
                    new_quantity=override.new_quantity,
                    reason=override.reason,
                )
                for override in human_input.item_overrides
            ],
        )


class DemandResultDTO(BaseModel):
    item_id: str
    item_name: str
    forecast: float
    ci_low: float
    ci_high: float
    confidence: float
    target_quantity: int
    explanation: str

    @classmethod
    def from_domain(cls, result: DemandResult) -> "DemandResultDTO":
        return cls(
            item_id=result.item_id,
            item_name=result.item_name,
            forecast=result.forecast,
            ci_low=result.ci_low,
            ci_high=result.ci_high,
            confidence=result.confidence,
            target_quantity=result.target_quantity,
            explanation=result.explanation,
        )


class PlanItemDTO(BaseModel):
    item_id: str
    item_name: str
    quantity: int
    unit_cost: float
    total_cost: float

    @classmethod
    def from_domain(cls, item: PlanItem) -> "PlanItemDTO":
        return cls(
            item_id=item.item_id,
            item_name=item.item_name,
            quantity=item.quantity,
            unit_cost=item.unit_cost,
            total_cost=item.total_cost,
        )


class PlanDTO(BaseModel):
    items: List[PlanItemDTO]
    total_cost: float
    total_units: int
    rationale: str

    @classmethod
    def from_domain(cls, plan: Plan) -> "PlanDTO":
        return cls(
            items=[PlanItemDTO.from_domain(item) for item in plan.items],
            total_cost=plan.total_cost,
            total_units=plan.total_units,
            rationale=plan.rationale,
        )


class TranscriptMessageDTO(BaseModel):
    id: UUID
    timestamp: datetime
    agent: AgentRole
    message: str
    is_thinking: bool = False

    @classmethod
    def from_domain(cls, message: TranscriptMessage) -> "TranscriptMessageDTO":
        return cls(
            id=message.id,
            timestamp=message.timestamp,
            agent=message.agent,
            message=message.message,
            is_thinking=message.is_thinking,
        )


class WorkflowStateDTO(BaseModel):
    """DTO for a workflow snapshot."""

    id: UUID
    status: WorkflowStatus
    item_ids: List[str]
    policy: PolicyDTO

    demand_results: List[DemandResultDTO] = Field(default_factory=list)
    plan: Optional[PlanDTO] = None
    human_input: Optional[HumanInputDTO] = None

    transcript: List[TranscriptMessageDTO] = Field(default_factory=list)
    messages: List[str] = Field(default_factory=list)

    awaiting_human_input: bool = False
    show_results: bool = False

    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, state: WorkflowState) -> "WorkflowStateDTO":
        return cls(
            id=state.id,
            status=state.status,
            item_ids=list(state.item_ids),
            policy=PolicyDTO.from_domain(state.policy),
            demand_results=[
                DemandResultDTO.from_domain(result) for result in state.demand_results
            ],
            plan=PlanDTO.from_domain(state.plan) if state.plan is not None else None,
            human_input=(
                HumanInputDTO.from_domain(state.human_input)
                if state.human_input is not None
                else None
            ),
            transcript=[
                TranscriptMessageDTO.from_domain(message)
                for message in state.transcript
            ],
            messages=list(state.messages),
            awaiting_human_input=state.awaiting_human_input,
            show_results=state.show_results,
            started_at=state.started_at,
            completed_at=state.completed_at,
            created_at=state.created_at,
            updated_at=state.updated_at,
        )


class WorkflowSummaryDTO(BaseModel):
    """DTO for workflow listings."""

    id: UUID
    status: WorkflowStatus
    item_count: int
    total_cost: Optional[float] = None
    awaiting_human_input: bool = False
    updated_at: datetime

    @classmethod
    def from_domain(cls, state: WorkflowState) -> "WorkflowSummaryDTO":
        return cls(
            id=state.id,
            status=state.status,
            item_count=len(state.item_ids),
            total_cost=state.plan.total_cost if state.plan is not None else None,
            awaiting_human_input=state.awaiting_human_input,
            updated_at=state.updated_at,
        )


class BudgetContextDTO(BaseModel):
    """DTO for the budget and capacity context a new run would use."""

    current_budget: float = Field(description="Latest budget entry, or the fallback")
    average_budget: float
    budget_trend: float = Field(description="Change vs. the previous budget entry")
    has_budget_history: bool
    warehouse_id: int
    warehouse_capacity: float
    summary: str
