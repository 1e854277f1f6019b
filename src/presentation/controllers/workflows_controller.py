"""
Presentation Layer - Workflows Controller

This module contains the FastAPI controller for planning workflows.
"""

from typing import List
from uuid import UUID

import structlog
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.application.dtos.workflow_dto import (
    HumanInputDTO,
    StartWorkflowRequestDTO,
    WorkflowStateDTO,
    WorkflowSummaryDTO,
)
from src.application.use_cases.planning_workflow_use_case import PlanningWorkflowUseCase
from src.domain.entities.errors import (
    InvalidWorkflowTransitionError,
    WorkflowNotFoundError,
)
from src.main.container import AppContainer

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/workflows", tags=["workflows"])


@router.post(
    "",
    response_model=WorkflowStateDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Start a planning workflow",
    description="""
    Run demand analysis, newsvendor sizing, the budget ledger and the
    warehouse capacity clamp for the given items.

    The response is either a completed workflow or one paused with
    `waiting_for_input` when any line's holding cost exceeds its shortage
    cost. Item order sets the budget priority.
    """,
)
@inject
async def start_workflow(
    request: StartWorkflowRequestDTO,
    workflow_use_case: PlanningWorkflowUseCase = Depends(
        Provide[AppContainer.planning_workflow_use_case]
    ),
) -> WorkflowStateDTO:
    """Start a planning workflow."""
    try:
        return await workflow_use_case.start(request)

    except Exception as e:
        logger.error(
            "workflow.start.unexpected_error",
            items=len(request.item_ids),
            error=str(e),
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get(
    "",
    response_model=List[WorkflowSummaryDTO],
    summary="List recent workflows",
)
@inject
async def list_workflows(
    limit: int = Query(20, ge=1, le=200, description="Maximum number of workflows"),
    workflow_use_case: PlanningWorkflowUseCase = Depends(
        Provide[AppContainer.planning_workflow_use_case]
    ),
) -> List[WorkflowSummaryDTO]:
    """List workflows, most recently updated first."""
    try:
        return await workflow_use_case.list_recent(limit=limit)

    except Exception as e:
        logger.error("workflow.list.unexpected_error", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get(
    "/{workflow_id}",
    response_model=WorkflowStateDTO,
    summary="Get workflow state",
)
@inject
async def get_workflow(
    workflow_id: UUID,
    workflow_use_case: PlanningWorkflowUseCase = Depends(
        Provide[AppContainer.planning_workflow_use_case]
    ),
) -> WorkflowStateDTO:
    """Get the latest snapshot of a workflow."""
    try:
        return await workflow_use_case.get(workflow_id)

    except WorkflowNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

    except Exception as e:
        logger.error(
            "workflow.get.unexpected_error",
            workflow_id=str(workflow_id),
            error=str(e),
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post(
    "/{workflow_id}/feedback",
    response_model=WorkflowStateDTO,
    summary="Submit reviewer feedback",
    description="""
    Resume a workflow paused at the review checkpoint.

    Budget wording ("budget", "cost", "expensive") and risk wording
    ("risk", "conservative", "safe") reduce all quantities, "very" makes the
    cut deeper, and naming an item reduces that item. Feedback that matches
    nothing trims every line by 5%.
    """,
)
@inject
async def submit_feedback(
    workflow_id: UUID,
    human_input: HumanInputDTO,
    workflow_use_case: PlanningWorkflowUseCase = Depends(
        Provide[AppContainer.planning_workflow_use_case]
    ),
) -> WorkflowStateDTO:
    """Submit human input for a paused workflow."""
    try:
        return await workflow_use_case.submit_feedback(workflow_id, human_input)

    except WorkflowNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

    except InvalidWorkflowTransitionError as e:
        raise HTTPException(status_code=409, detail=e.message)

    except Exception as e:
        logger.error(
            "workflow.feedback.unexpected_error",
            workflow_id=str(workflow_id),
            error=str(e),
        )
        raise HTTPException(status_code=500, detail="Internal server error")
