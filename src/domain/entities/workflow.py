"""
Domain Entities - Planning Workflow

This module defines the planning workflow state and its state machine:

    ready -> running -> [waiting_for_input -> running] -> complete

The human review checkpoint (waiting_for_input) can be entered at most once
per run and `complete` is terminal. A failure at any point moves the
workflow straight to `complete` with a diagnostic message.
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple
from uuid import UUID, uuid4

from src.domain.entities.demand import ConservatismLevel, DemandResult, PlanningPolicy
from src.domain.entities.errors import InvalidWorkflowTransitionError
from src.domain.entities.plan import Plan


class WorkflowStatus(str, Enum):
    """Status of a planning workflow."""

    READY = "ready"
    RUNNING = "running"
    WAITING_FOR_INPUT = "waiting_for_input"
    COMPLETE = "complete"


class AgentRole(str, Enum):
    """Author of a transcript message."""

    DEMAND = "demand"
    PURCHASING = "purchasing"
    RISK = "risk"
    HUMAN = "human"


_ALLOWED_TRANSITIONS = {
    WorkflowStatus.READY: {WorkflowStatus.RUNNING},
    WorkflowStatus.RUNNING: {WorkflowStatus.WAITING_FOR_INPUT, WorkflowStatus.COMPLETE},
    WorkflowStatus.WAITING_FOR_INPUT: {WorkflowStatus.RUNNING},
    WorkflowStatus.COMPLETE: set(),
}


@dataclass
class TranscriptMessage:
    """One message of the stage transcript shown next to the plan."""

    agent: AgentRole
    message: str
    is_thinking: bool = False
    id: UUID = field(default_factory=uuid4)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class ItemOverride:
    item_id: str
    original_quantity: int
    new_quantity: int
    reason: str = ""


@dataclass(frozen=True)
class HumanInput:
    """Feedback submitted at the review checkpoint."""

    feedback: str
    risk_level: Optional[ConservatismLevel] = None
    budget_adjustment: Optional[float] = None
    item_overrides: Tuple[ItemOverride, ...] = ()


@dataclass
class WorkflowState:
    """A single planning run, mutated in place as the pipeline advances."""

    id: UUID = field(default_factory=uuid4)
    status: WorkflowStatus = WorkflowStatus.READY
    item_ids: List[str] = field(default_factory=list)
    policy: PlanningPolicy = field(default_factory=PlanningPolicy)

    demand_results: List[DemandResult] = field(default_factory=list)
    plan: Optional[Plan] = None
    human_input: Optional[HumanInput] = None

    # Budget the plan was built against, kept for the resumed half of the run
    available_budget: Optional[float] = None
    budget_context: str = ""

    transcript: List[TranscriptMessage] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)

    awaiting_human_input: bool = False
    show_results: bool = False
    review_requested: bool = False

    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def update_timestamp(self) -> None:
        """Update the 'updated_at' timestamp to current time."""
        self.updated_at = datetime.now(timezone.utc)

    def _transition(self, target: WorkflowStatus) -> None:
        if target not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidWorkflowTransitionError(self.status.value, target.value)
        self.status = target
        self.update_timestamp()

    @property
    def is_terminal(self) -> bool:
        return self.status == WorkflowStatus.COMPLETE

    def start(self) -> None:
        """Leave `ready` and begin the automated stages."""
        self._transition(WorkflowStatus.RUNNING)
        self.started_at = datetime.now(timezone.utc)

    def request_review(self, plan: Plan) -> None:
        """Freeze the plan and pause for human input."""
        if self.review_requested:
            raise InvalidWorkflowTransitionError(
                self.status.value,
                WorkflowStatus.WAITING_FOR_INPUT.value,
                {"reason": "human review already requested in this run"},
            )
        self._transition(WorkflowStatus.WAITING_FOR_INPUT)
        self.plan = plan.copy()
        self.review_requested = True
        self.awaiting_human_input = True
        self.show_results = False

    def resume_with_input(self, human_input: HumanInput) -> None:
        """Record the reviewer's input and resume the automated stages."""
        self._transition(WorkflowStatus.RUNNING)
        self.human_input = human_input
        self.awaiting_human_input = False

    def complete(self) -> None:
        self._transition(WorkflowStatus.COMPLETE)
        self.show_results = True
        self.completed_at = datetime.now(timezone.utc)

    def mark_failed(self, error: str) -> None:
        """Force the terminal state, keeping whatever partial plan exists."""
        self.messages.append(f"Error: {error}")
        self.status = WorkflowStatus.COMPLETE
        self.awaiting_human_input = False
        self.show_results = self.plan is not None
        self.completed_at = datetime.now(timezone.utc)
        self.update_timestamp()

    def add_message(
        self, agent: AgentRole, message: str, is_thinking: bool = False
    ) -> TranscriptMessage:
        entry = TranscriptMessage(agent=agent, message=message, is_thinking=is_thinking)
        self.transcript.append(entry)
        self.update_timestamp()
        return entry

    def snapshot(self) -> "WorkflowState":
        """Deep copy that later pipeline mutations cannot affect."""
        return copy.deepcopy(self)
