"""Planning context endpoints."""

import structlog
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException

from src.application.dtos.workflow_dto import BudgetContextDTO
from src.application.use_cases.planning_workflow_use_case import GetBudgetContextUseCase
from src.domain.entities.errors import PlanningDataError
from src.main.container import AppContainer

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/planning", tags=["planning"])


@router.get(
    "/budget",
    response_model=BudgetContextDTO,
    summary="Current budget and warehouse capacity",
)
@inject
async def get_budget_context(
    budget_use_case: GetBudgetContextUseCase = Depends(
        Provide[AppContainer.get_budget_context_use_case]
    ),
) -> BudgetContextDTO:
    """Return the budget and capacity a new workflow would start from."""
    try:
        return await budget_use_case.execute()

    except PlanningDataError as e:
        logger.error("planning.budget.data_error", error=e.message, **e.details)
        raise HTTPException(status_code=500, detail=e.message)

    except Exception as e:
        logger.error("planning.budget.unexpected_error", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
