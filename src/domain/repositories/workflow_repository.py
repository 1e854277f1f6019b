"""
Domain Repository Interface - Planning Workflow

Persistence of workflow snapshots between the review checkpoint and the
reviewer's answer.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.domain.entities.workflow import WorkflowState, WorkflowStatus


class IWorkflowRepository(ABC):
    """Interface for workflow state repository."""

    @abstractmethod
    async def create(self, workflow: WorkflowState) -> WorkflowState:
        """Store a new workflow."""
        pass

    @abstractmethod
    async def get_by_id(self, workflow_id: UUID) -> Optional[WorkflowState]:
        """Get the stored snapshot of a workflow."""
        pass

    @abstractmethod
    async def update(
        self,
        workflow: WorkflowState,
        expected_status: Optional[WorkflowStatus] = None,
    ) -> WorkflowState:
        """
        Replace the stored snapshot of a workflow.

        When `expected_status` is given the write only succeeds if the stored
        snapshot still has that status.

        Raises:
            WorkflowNotFoundError: If the workflow was never created
            InvalidWorkflowTransitionError: If the stored status differs from
                `expected_status`
        """
        pass

    @abstractmethod
    async def list_recent(self, limit: int = 20) -> List[WorkflowState]:
        """List workflows, most recently updated first."""
        pass
