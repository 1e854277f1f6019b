from __future__ import annotations

import math
from dataclasses import replace
from datetime import date
from uuid import uuid4

import pytest

from src.application.dtos.workflow_dto import (
    HumanInputDTO,
    PolicyDTO,
    StartWorkflowRequestDTO,
)
from src.application.use_cases.planning_workflow_use_case import (
    GetBudgetContextUseCase,
    PlanningWorkflowUseCase,
)
from src.domain.entities.demand import ConservatismLevel
from src.domain.entities.errors import (
    InvalidWorkflowTransitionError,
    WorkflowNotFoundError,
)
from src.domain.entities.workflow import AgentRole, WorkflowStatus
from src.domain.services.constraint_engine import ConstraintEngine
from src.domain.services.demand_analyzer import DemandAnalyzer
from src.domain.services.feedback_reconciler import FeedbackReconciler
from src.domain.services.inventory_planner import InventoryPlanner
from src.infrastructure.gateways.gemini_gateway import ReasoningGatewayError
from src.infrastructure.repositories.in_memory_workflow_repository import (
    InMemoryWorkflowRepository,
)
from src.infrastructure.services.reasoners import DeterministicReasoner, LLMReasoner
from tests.conftest import (
    ITEM_A,
    ITEM_B,
    ITEM_C,
    ITEM_DEGENERATE,
    StubPlanningDataRepository,
    make_forecast,
)


class _FailingPlanningDataRepository:
    async def load_context(self):
        raise RuntimeError("data directory unreadable")


class _LoadOnceRepository(StubPlanningDataRepository):
    async def load_context(self):
        if self.loads:
            raise RuntimeError("data directory unreadable")
        return await super().load_context()


class _FailingGateway:
    async def generate(self, prompt: str) -> str:
        raise ReasoningGatewayError("quota exceeded")

    async def ping(self) -> bool:  # pragma: no cover - not used here
        return False


def _use_case(planning_repository, reasoner, warehouse_id: int = 11):
    return PlanningWorkflowUseCase(
        planning_data_repository=planning_repository,
        workflow_repository=InMemoryWorkflowRepository(),
        demand_analyzer=DemandAnalyzer(reasoner),
        inventory_planner=InventoryPlanner(),
        constraint_engine=ConstraintEngine(),
        feedback_reconciler=FeedbackReconciler(),
        reasoner=reasoner,
        warehouse_id=warehouse_id,
    )


def _request(*item_ids: str, **policy) -> StartWorkflowRequestDTO:
    return StartWorkflowRequestDTO(item_ids=list(item_ids), policy=PolicyDTO(**policy))


def _lines(state):
    return [(item.item_id, item.quantity, item.unit_cost) for item in state.plan.items]


@pytest.mark.asyncio
async def test_start_completes_without_review(stub_planning_repository, stub_reasoner) -> None:
    use_case = _use_case(stub_planning_repository, stub_reasoner)
    updates = []

    state = await use_case.start(_request(ITEM_A, ITEM_B), on_update=updates.append)

    assert state.status is WorkflowStatus.COMPLETE
    assert state.show_results is True
    assert state.awaiting_human_input is False
    assert _lines(state) == [(ITEM_A, 3, 15.0), (ITEM_B, 12, 20.0)]
    assert state.plan.total_cost == 285.0
    assert state.plan.rationale == "Warehouse capacity constraints applied (max 500 units)"
    assert [result.explanation for result in state.demand_results] == [
        "explained Widget",
        "explained Gadget",
    ]
    assert [(m.agent, m.message) for m in state.transcript] == [
        (
            AgentRole.DEMAND,
            "Working with medium risk level and $1,000.00 budget. Starting analysis...",
        ),
        (
            AgentRole.DEMAND,
            "Analyzed 2 items with forecast data and confidence intervals. "
            "2 have high confidence (>70%). Ready for purchasing optimization.",
        ),
        (
            AgentRole.PURCHASING,
            "Applied newsvendor policy. Generated plan: $285.00 for 15 units "
            "within $1,000.00 weekly budget.",
        ),
        (
            AgentRole.RISK,
            "Applied warehouse capacity constraints. Final plan: $285.00 for 15 units "
            "within 500 unit capacity.",
        ),
        (AgentRole.RISK, "plan assessed"),
        (AgentRole.DEMAND, "Supply planning output finalized."),
    ]
    assert len(updates) == 5
    assert updates[-1].status is WorkflowStatus.COMPLETE
    assert stub_planning_repository.loads == 1

    facts = stub_reasoner.plan_calls[0]
    assert facts.total_cost == 285.0
    assert facts.budget_context.startswith("Current budget: $1,000")
    assert len(stub_reasoner.demand_calls[0].history) == 1


@pytest.mark.asyncio
async def test_start_accepts_async_progress_callback(
    stub_planning_repository, stub_reasoner
) -> None:
    use_case = _use_case(stub_planning_repository, stub_reasoner)
    statuses = []

    async def on_update(state) -> None:
        statuses.append(state.status)

    await use_case.start(_request(ITEM_A), on_update=on_update)

    assert statuses[0] is WorkflowStatus.RUNNING
    assert statuses[-1] is WorkflowStatus.COMPLETE


@pytest.mark.asyncio
async def test_review_gate_pauses_then_feedback_completes(
    stub_planning_repository, stub_reasoner
) -> None:
    use_case = _use_case(stub_planning_repository, stub_reasoner)

    paused = await use_case.start(_request(ITEM_A, ITEM_C))

    assert paused.status is WorkflowStatus.WAITING_FOR_INPUT
    assert paused.awaiting_human_input is True
    assert paused.show_results is False
    assert _lines(paused) == [(ITEM_A, 3, 15.0), (ITEM_C, 6, 13.0)]
    assert paused.transcript[-1].message == (
        "Holding cost exceeds shortage cost for Gizmo. Awaiting human review and input."
    )
    assert stub_reasoner.plan_calls == []

    stored = await use_case.get(paused.id)
    assert stored.status is WorkflowStatus.WAITING_FOR_INPUT

    finished = await use_case.submit_feedback(
        paused.id, HumanInputDTO(feedback="That is too expensive")
    )

    assert finished.status is WorkflowStatus.COMPLETE
    assert finished.human_input.feedback == "That is too expensive"
    assert _lines(finished) == [(ITEM_A, 2, 15.0), (ITEM_C, 5, 13.0)]
    assert finished.plan.total_cost == 95.0
    assert finished.plan.rationale.startswith("Plan modified based on human feedback.")
    tail = [(m.agent, m.message) for m in finished.transcript[-5:]]
    assert tail == [
        (AgentRole.HUMAN, "That is too expensive"),
        (AgentRole.RISK, "feedback acknowledged"),
        (
            AgentRole.PURCHASING,
            "Reduced quantities by 15% to address budget concerns. New total: $95.00",
        ),
        (AgentRole.RISK, "plan assessed"),
        (AgentRole.DEMAND, "Final plan approved with human input incorporated."),
    ]
    assert stub_reasoner.feedback_calls[0].total_cost == 123.0
    assert stub_reasoner.plan_calls[0].feedback == "That is too expensive"


@pytest.mark.asyncio
async def test_feedback_without_changes_keeps_plan(stub_planning_repository, stub_reasoner) -> None:
    use_case = _use_case(stub_planning_repository, stub_reasoner, warehouse_id=12)

    paused = await use_case.start(_request(ITEM_C))
    assert _lines(paused) == [(ITEM_C, 1, 13.0)]

    finished = await use_case.submit_feedback(paused.id, HumanInputDTO(feedback="fine"))

    assert _lines(finished) == [(ITEM_C, 1, 13.0)]
    assert any(
        m.message.startswith("Thank you for the feedback. We'll keep the current plan")
        for m in finished.transcript
    )


@pytest.mark.asyncio
async def test_feedback_rejected_unless_waiting(stub_planning_repository, stub_reasoner) -> None:
    use_case = _use_case(stub_planning_repository, stub_reasoner)
    completed = await use_case.start(_request(ITEM_A))

    with pytest.raises(InvalidWorkflowTransitionError):
        await use_case.submit_feedback(completed.id, HumanInputDTO(feedback="more"))

    with pytest.raises(WorkflowNotFoundError):
        await use_case.submit_feedback(uuid4(), HumanInputDTO(feedback="more"))


@pytest.mark.asyncio
async def test_review_happens_at_most_once(stub_planning_repository, stub_reasoner) -> None:
    use_case = _use_case(stub_planning_repository, stub_reasoner)
    paused = await use_case.start(_request(ITEM_C))
    await use_case.submit_feedback(paused.id, HumanInputDTO(feedback="ok"))

    with pytest.raises(InvalidWorkflowTransitionError):
        await use_case.submit_feedback(paused.id, HumanInputDTO(feedback="again"))


@pytest.mark.asyncio
async def test_degenerate_cost_item_is_excluded(stub_planning_repository, stub_reasoner) -> None:
    use_case = _use_case(stub_planning_repository, stub_reasoner)

    state = await use_case.start(_request(ITEM_A, ITEM_DEGENERATE))

    assert state.status is WorkflowStatus.COMPLETE
    assert _lines(state) == [(ITEM_A, 3, 15.0)]
    assert state.messages[0].startswith("Product 104 excluded: Critical ratio")
    assert any(m.message.startswith("Excluded Product 104") for m in state.transcript)


@pytest.mark.asyncio
async def test_item_without_forecast_is_skipped(stub_planning_repository, stub_reasoner) -> None:
    use_case = _use_case(stub_planning_repository, stub_reasoner)

    state = await use_case.start(_request(ITEM_A, "9/9/999"))

    assert state.messages == ["No forecast found for 9/9/999; item skipped."]
    assert [result.item_id for result in state.demand_results] == [ITEM_A]


@pytest.mark.asyncio
async def test_max_cost_overrides_budget_in_caller_order(
    stub_planning_repository, stub_reasoner
) -> None:
    use_case = _use_case(stub_planning_repository, stub_reasoner)

    state = await use_case.start(
        _request(ITEM_B, ITEM_A, conservatism_level=ConservatismLevel.HIGH, max_cost=200)
    )

    assert _lines(state) == [(ITEM_A, 3, 15.0)]
    assert state.transcript[0].message == (
        "Working with high risk level and $200.00 budget. Starting analysis..."
    )


@pytest.mark.asyncio
async def test_capacity_clamps_lines(stub_planning_repository, stub_reasoner) -> None:
    use_case = _use_case(stub_planning_repository, stub_reasoner, warehouse_id=12)

    state = await use_case.start(_request(ITEM_A, ITEM_B))

    assert _lines(state) == [(ITEM_A, 1, 15.0), (ITEM_B, 1, 20.0)]
    assert state.plan.total_cost == 35.0


@pytest.mark.asyncio
async def test_duplicate_item_ids_are_planned_once(stub_planning_repository, stub_reasoner) -> None:
    use_case = _use_case(stub_planning_repository, stub_reasoner)

    state = await use_case.start(_request(ITEM_A, ITEM_A, ITEM_B))

    assert state.item_ids == [ITEM_A, ITEM_B]
    assert len(state.plan.items) == 2


@pytest.mark.asyncio
async def test_stage_failure_completes_with_error(stub_reasoner) -> None:
    use_case = _use_case(_FailingPlanningDataRepository(), stub_reasoner)

    state = await use_case.start(_request(ITEM_A))

    assert state.status is WorkflowStatus.COMPLETE
    assert state.messages[-1] == "Error: data directory unreadable"
    assert state.plan is None
    assert state.show_results is False


@pytest.mark.asyncio
async def test_reasoner_variant_never_changes_numbers(stub_planning_repository) -> None:
    deterministic = _use_case(stub_planning_repository, DeterministicReasoner())
    degraded = _use_case(stub_planning_repository, LLMReasoner(_FailingGateway()))

    first = await deterministic.start(_request(ITEM_A, ITEM_B))
    second = await degraded.start(_request(ITEM_A, ITEM_B))

    assert _lines(first) == _lines(second)
    assert [m.message for m in first.transcript] == [m.message for m in second.transcript]
    assert first.transcript[-2].message == (
        "Plan for 2 items totaling $285.00 is within budget with medium risk approach."
    )


@pytest.mark.asyncio
async def test_list_recent_returns_summaries(stub_planning_repository, stub_reasoner) -> None:
    use_case = _use_case(stub_planning_repository, stub_reasoner)
    first = await use_case.start(_request(ITEM_A))
    second = await use_case.start(_request(ITEM_C))

    summaries = await use_case.list_recent(limit=5)

    assert [summary.id for summary in summaries] == [second.id, first.id]
    assert summaries[0].awaiting_human_input is True
    assert summaries[1].total_cost == 45.0


@pytest.mark.asyncio
async def test_get_unknown_workflow_raises(stub_planning_repository, stub_reasoner) -> None:
    with pytest.raises(WorkflowNotFoundError):
        await _use_case(stub_planning_repository, stub_reasoner).get(uuid4())


@pytest.mark.asyncio
async def test_budget_context_use_case(stub_planning_repository) -> None:
    dto = await GetBudgetContextUseCase(stub_planning_repository, warehouse_id=11).execute()

    assert dto.current_budget == 1000.0
    assert dto.average_budget == 950.0
    assert dto.budget_trend == 100.0
    assert dto.has_budget_history is True
    assert dto.warehouse_capacity == 500.0
    assert dto.summary == "Current budget: $1,000, Average: $950, Trend: +100"


@pytest.mark.asyncio
async def test_infinite_forecast_skips_only_that_item(planning_context, stub_reasoner) -> None:
    context = replace(
        planning_context,
        forecasts=planning_context.forecasts
        + (make_forecast(ITEM_B, math.inf, 8.0, 12.0, day=date(2024, 1, 15)),),
    )
    use_case = _use_case(StubPlanningDataRepository(context), stub_reasoner)

    state = await use_case.start(_request(ITEM_A, ITEM_B))

    assert state.status is WorkflowStatus.COMPLETE
    assert _lines(state) == [(ITEM_A, 3, 15.0)]
    assert state.messages == [f"Forecast for {ITEM_B} is not finite; item skipped."]
    assert [result.item_id for result in state.demand_results] == [ITEM_A]


@pytest.mark.asyncio
async def test_unbounded_order_quantity_excludes_item(planning_context, stub_reasoner) -> None:
    # Each bound is finite but their spread overflows to an infinite deviation
    context = replace(
        planning_context,
        forecasts=planning_context.forecasts
        + (make_forecast(ITEM_B, 10.0, -1e308, 1e308, day=date(2024, 1, 15)),),
    )
    use_case = _use_case(StubPlanningDataRepository(context), stub_reasoner)

    state = await use_case.start(_request(ITEM_A, ITEM_B))

    assert state.status is WorkflowStatus.COMPLETE
    assert _lines(state) == [(ITEM_A, 3, 15.0)]
    assert state.messages[0].startswith("Gadget excluded: Forecast 10.0")


@pytest.mark.asyncio
async def test_feedback_reuses_budget_from_paused_run(planning_context, stub_reasoner) -> None:
    repository = _LoadOnceRepository(planning_context)
    use_case = _use_case(repository, stub_reasoner)

    paused = await use_case.start(_request(ITEM_A, ITEM_C))
    finished = await use_case.submit_feedback(paused.id, HumanInputDTO(feedback="fine"))

    assert repository.loads == 1
    assert finished.status is WorkflowStatus.COMPLETE
    assert not any(message.startswith("Error:") for message in finished.messages)
    for facts in (stub_reasoner.feedback_calls[0], stub_reasoner.plan_calls[0]):
        assert facts.available_budget == 1000.0
        assert facts.budget_context == "Current budget: $1,000, Average: $950, Trend: +100"


@pytest.mark.asyncio
async def test_second_answer_from_stale_snapshot_is_rejected(
    stub_planning_repository, stub_reasoner, monkeypatch
) -> None:
    use_case = _use_case(stub_planning_repository, stub_reasoner)
    paused = await use_case.start(_request(ITEM_C))
    stale = await use_case.workflow_repository.get_by_id(paused.id)

    await use_case.submit_feedback(paused.id, HumanInputDTO(feedback="ok"))

    async def _stale_get_by_id(workflow_id):
        return stale.snapshot()

    monkeypatch.setattr(use_case.workflow_repository, "get_by_id", _stale_get_by_id)

    with pytest.raises(InvalidWorkflowTransitionError):
        await use_case.submit_feedback(paused.id, HumanInputDTO(feedback="too expensive"))

    monkeypatch.undo()
    stored = await use_case.get(paused.id)
    assert stored.status is WorkflowStatus.COMPLETE
    assert [m.message for m in stored.transcript if m.agent is AgentRole.HUMAN] == ["ok"]
    assert len(stub_reasoner.feedback_calls) == 1
