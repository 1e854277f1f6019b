"""
Infrastructure Repository - In-Memory Workflow Store

Keeps workflow snapshots in process memory. Every read and write copies the
state so a caller can never mutate what is stored. Once more than
`max_workflows` runs are stored, the oldest completed ones are evicted.
"""

import asyncio
from typing import Dict, List, Optional
from uuid import UUID

import structlog

from src.domain.entities.errors import InvalidWorkflowTransitionError, WorkflowNotFoundError
from src.domain.entities.workflow import WorkflowState, WorkflowStatus
from src.domain.repositories.workflow_repository import IWorkflowRepository
from src.shared.consts import MAX_STORED_WORKFLOWS

logger = structlog.get_logger(__name__)


class InMemoryWorkflowRepository(IWorkflowRepository):
    """Dictionary-backed workflow repository."""

    def __init__(self, max_workflows: int = MAX_STORED_WORKFLOWS):
        if max_workflows < 1:
            raise ValueError("max_workflows must be at least 1")
        self.max_workflows = max_workflows
        self._workflows: Dict[UUID, WorkflowState] = {}
        self._lock = asyncio.Lock()

    async def create(self, workflow: WorkflowState) -> WorkflowState:
        async with self._lock:
            self._workflows[workflow.id] = workflow.snapshot()
            evicted = self._evict_completed()
        logger.info(
            "workflow.created",
            workflow_id=str(workflow.id),
            items=len(workflow.item_ids),
        )
        if evicted:
            logger.info("workflow.evicted", count=len(evicted))
        return workflow

    async def get_by_id(self, workflow_id: UUID) -> Optional[WorkflowState]:
        async with self._lock:
            stored = self._workflows.get(workflow_id)
        return stored.snapshot() if stored else None

    async def update(
        self,
        workflow: WorkflowState,
        expected_status: Optional[WorkflowStatus] = None,
    ) -> WorkflowState:
        async with self._lock:
            stored = self._workflows.get(workflow.id)
            if stored is None:
                raise WorkflowNotFoundError(str(workflow.id))
            if expected_status is not None and stored.status != expected_status:
                raise InvalidWorkflowTransitionError(
                    stored.status.value,
                    workflow.status.value,
                    {"reason": f"workflow is no longer {expected_status.value}"},
                )
            workflow.update_timestamp()
            self._workflows[workflow.id] = workflow.snapshot()
        logger.debug(
            "workflow.updated",
            workflow_id=str(workflow.id),
            status=workflow.status.value,
        )
        return workflow

    async def list_recent(self, limit: int = 20) -> List[WorkflowState]:
        async with self._lock:
            ordered = sorted(
                self._workflows.values(),
                key=lambda state: state.updated_at,
                reverse=True,
            )
        return [state.snapshot() for state in ordered[:limit]]

    def _evict_completed(self) -> List[UUID]:
        # Caller holds the lock. Runs still in progress or paused are never evicted.
        excess = len(self._workflows) - self.max_workflows
        if excess <= 0:
            return []
        completed = sorted(
            (state for state in self._workflows.values() if state.is_terminal),
            key=lambda state: state.updated_at,
        )
        evicted = [state.id for state in completed[:excess]]
        for workflow_id in evicted:
            del self._workflows[workflow_id]
        return evicted
