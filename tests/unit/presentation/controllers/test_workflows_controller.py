from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from fastapi import HTTPException

from src.application.dtos.workflow_dto import (
    HumanInputDTO,
    PolicyDTO,
    StartWorkflowRequestDTO,
    WorkflowStateDTO,
    WorkflowSummaryDTO,
)
from src.domain.entities.errors import (
    InvalidWorkflowTransitionError,
    WorkflowNotFoundError,
)
from src.domain.entities.workflow import WorkflowStatus
from src.presentation.controllers.workflows_controller import (
    get_workflow,
    list_workflows,
    start_workflow,
    submit_feedback,
)


def _state(status: WorkflowStatus = WorkflowStatus.COMPLETE) -> WorkflowStateDTO:
    now = datetime.now(timezone.utc)
    return WorkflowStateDTO(
        id=uuid4(),
        status=status,
        item_ids=["1/11/101"],
        policy=PolicyDTO(),
        created_at=now,
        updated_at=now,
    )


class _StubWorkflowUseCase:
    def __init__(self, state=None, error: Exception | None = None):
        self.state = state or _state()
        self.error = error
        self.calls = []

    async def start(self, request):
        self.calls.append(("start", request))
        if self.error:
            raise self.error
        return self.state

    async def get(self, workflow_id):
        self.calls.append(("get", workflow_id))
        if self.error:
            raise self.error
        return self.state

    async def submit_feedback(self, workflow_id, human_input):
        self.calls.append(("feedback", workflow_id, human_input))
        if self.error:
            raise self.error
        return self.state

    async def list_recent(self, limit: int = 20):
        self.calls.append(("list", limit))
        if self.error:
            raise self.error
        return [
            WorkflowSummaryDTO(
                id=self.state.id,
                status=self.state.status,
                item_count=1,
                updated_at=self.state.updated_at,
            )
        ]


def _start_request() -> StartWorkflowRequestDTO:
    return StartWorkflowRequestDTO(item_ids=["1/11/101"])


@pytest.mark.asyncio
async def test_start_workflow_returns_state() -> None:
    use_case = _StubWorkflowUseCase(_state(WorkflowStatus.WAITING_FOR_INPUT))

    result = await start_workflow(request=_start_request(), workflow_use_case=use_case)

    assert result.status is WorkflowStatus.WAITING_FOR_INPUT
    assert use_case.calls[0][0] == "start"


@pytest.mark.asyncio
async def test_start_workflow_unexpected_error_is_500() -> None:
    use_case = _StubWorkflowUseCase(error=RuntimeError("boom"))

    with pytest.raises(HTTPException) as exc:
        await start_workflow(request=_start_request(), workflow_use_case=use_case)

    assert exc.value.status_code == 500


@pytest.mark.asyncio
async def test_list_workflows_passes_limit() -> None:
    use_case = _StubWorkflowUseCase()

    result = await list_workflows(limit=5, workflow_use_case=use_case)

    assert len(result) == 1
    assert use_case.calls == [("list", 5)]


@pytest.mark.asyncio
async def test_get_workflow_not_found_is_404() -> None:
    workflow_id = uuid4()
    use_case = _StubWorkflowUseCase(error=WorkflowNotFoundError(str(workflow_id)))

    with pytest.raises(HTTPException) as exc:
        await get_workflow(workflow_id=workflow_id, workflow_use_case=use_case)

    assert exc.value.status_code == 404
    assert str(workflow_id) in exc.value.detail


@pytest.mark.asyncio
async def test_get_workflow_returns_state() -> None:
    use_case = _StubWorkflowUseCase()

    result = await get_workflow(workflow_id=use_case.state.id, workflow_use_case=use_case)

    assert result.id == use_case.state.id


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        (WorkflowNotFoundError("x"), 404),
        (InvalidWorkflowTransitionError("complete", "running"), 409),
        (RuntimeError("boom"), 500),
    ],
)
async def test_submit_feedback_error_mapping(error, status_code) -> None:
    use_case = _StubWorkflowUseCase(error=error)

    with pytest.raises(HTTPException) as exc:
        await submit_feedback(
            workflow_id=uuid4(),
            human_input=HumanInputDTO(feedback="too expensive"),
            workflow_use_case=use_case,
        )

    assert exc.value.status_code == status_code


@pytest.mark.asyncio
async def test_submit_feedback_returns_state() -> None:
    use_case = _StubWorkflowUseCase()
    workflow_id = uuid4()

    result = await submit_feedback(
        workflow_id=workflow_id,
        human_input=HumanInputDTO(feedback="ok"),
        workflow_use_case=use_case,
    )

    assert result.status is WorkflowStatus.COMPLETE
    assert use_case.calls[0][1] == workflow_id
