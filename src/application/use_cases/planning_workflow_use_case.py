"""
Planning Workflow Use Case

Runs the procurement pipeline for a set of items:

1. demand analysis of the newest forecast per item
2. newsvendor sizing and the greedy budget ledger
3. warehouse capacity clamp
4. the human-review gate, then either completion or a pause for feedback

Each stage appends to the transcript, persists a snapshot and hands a DTO of
that snapshot to the optional progress callback.
"""

import inspect
from typing import Any, Callable, List, Optional
from uuid import UUID

import structlog

from src.application.dtos.workflow_dto import (
    BudgetContextDTO,
    HumanInputDTO,
    StartWorkflowRequestDTO,
    WorkflowStateDTO,
    WorkflowSummaryDTO,
)
from src.domain.entities.demand import DemandResult
from src.domain.entities.errors import (
    DegenerateCriticalRatioError,
    InvalidWorkflowTransitionError,
    NonFiniteDemandError,
    WorkflowNotFoundError,
)
from src.domain.entities.plan import Plan, PlanItem
from src.domain.entities.planning_data import PlanningContext, product_key
from src.domain.entities.workflow import (
    AgentRole,
    HumanInput,
    WorkflowState,
    WorkflowStatus,
)
from src.domain.gateways.reasoner import IReasoner, PlanFacts
from src.domain.repositories.planning_data_repository import IPlanningDataRepository
from src.domain.repositories.workflow_repository import IWorkflowRepository
from src.domain.services.constraint_engine import ConstraintEngine
from src.domain.services.demand_analyzer import DemandAnalyzer
from src.domain.services.feedback_reconciler import FeedbackReconciler, FeedbackRule
from src.domain.services.inventory_planner import InventoryPlanner
from src.domain.services.review_gate import items_requiring_review
from src.shared.consts import DEFAULT_WAREHOUSE_ID
from src.shared.logging import bind_workflow_context

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[WorkflowStateDTO], Any]

HIGH_CONFIDENCE = 0.7

_ADJUSTMENT_MESSAGES = {
    FeedbackRule.BUDGET: (
        AgentRole.PURCHASING,
        "Reduced quantities by {percent}% to address budget concerns. New total: {total}",
    ),
    FeedbackRule.RISK: (
        AgentRole.RISK,
        "Adopted more conservative approach, reducing quantities by {percent}%. "
        "New total: {total}",
    ),
    FeedbackRule.NAMED_ITEM: (
        AgentRole.DEMAND,
        "Adjusted quantities for mentioned items based on your feedback. New total: {total}",
    ),
    FeedbackRule.FALLBACK: (
        AgentRole.PURCHASING,
        "Made small adjustments based on your feedback. New total: {total}",
    ),
}


def _money(amount: float) -> str:
    return f"${amount:,.2f}"


class PlanningWorkflowUseCase:
    """Use case for starting, resuming and reading planning workflows."""

    def __init__(
        self,
        planning_data_repository: IPlanningDataRepository,
        workflow_repository: IWorkflowRepository,
        demand_analyzer: DemandAnalyzer,
        inventory_planner: InventoryPlanner,
        constraint_engine: ConstraintEngine,
        feedback_reconciler: FeedbackReconciler,
        reasoner: IReasoner,
        warehouse_id: int = DEFAULT_WAREHOUSE_ID,
    ):
        self.planning_data_repository = planning_data_repository
        self.workflow_repository = workflow_repository
        self.demand_analyzer = demand_analyzer
        self.inventory_planner = inventory_planner
        self.constraint_engine = constraint_engine
        self.feedback_reconciler = feedback_reconciler
        self.reasoner = reasoner
        self.warehouse_id = warehouse_id

    async def start(
        self,
        request: StartWorkflowRequestDTO,
        on_update: Optional[ProgressCallback] = None,
    ) -> WorkflowStateDTO:
        """
        Run the automated stages for the requested items.

        Returns the snapshot after the run either completed or paused at the
        review checkpoint. Stage failures never raise; they complete the
        workflow with an "Error: ..." diagnostic.
        """
        state = WorkflowState(
            item_ids=list(dict.fromkeys(request.item_ids)),
            policy=request.policy.to_domain(),
        )
        await self.workflow_repository.create(state)

        with bind_workflow_context(str(state.id)):
            logger.info(
                "workflow.started",
                items=len(state.item_ids),
                conservatism_level=state.policy.conservatism_level.value,
                max_cost=state.policy.max_cost,
            )
            try:
                state.start()
                await self._run_automated_stages(state, on_update)
            except Exception as exc:
                logger.exception("workflow.failed", error=str(exc))
                state.mark_failed(str(exc))
                await self._publish(state, on_update)

            logger.info("workflow.stopped", status=state.status.value)

        return WorkflowStateDTO.from_domain(state)

    async def submit_feedback(
        self,
        workflow_id: UUID,
        human_input: HumanInputDTO,
        on_update: Optional[ProgressCallback] = None,
    ) -> WorkflowStateDTO:
        """
        Resume a paused workflow with reviewer feedback and finish it.

        Raises:
            WorkflowNotFoundError: If the workflow does not exist
            InvalidWorkflowTransitionError: If the workflow is not waiting for input
        """
        state = await self._get_state(workflow_id)
        if state.status != WorkflowStatus.WAITING_FOR_INPUT:
            raise InvalidWorkflowTransitionError(
                state.status.value,
                WorkflowStatus.RUNNING.value,
                {"reason": "workflow is not waiting for human input"},
            )

        feedback = human_input.to_domain()
        state.resume_with_input(feedback)
        state.add_message(AgentRole.HUMAN, feedback.feedback)
        # Only one reviewer answer may resume the paused snapshot
        await self._publish(
            state, on_update, expected_status=WorkflowStatus.WAITING_FOR_INPUT
        )

        with bind_workflow_context(str(state.id)):
            try:
                await self._process_feedback(state, feedback, on_update)
            except Exception as exc:
                logger.exception("workflow.feedback.failed", error=str(exc))
                state.mark_failed(str(exc))
                await self._publish(state, on_update)

            logger.info("workflow.stopped", status=state.status.value)

        return WorkflowStateDTO.from_domain(state)

    async def get(self, workflow_id: UUID) -> WorkflowStateDTO:
        state = await self._get_state(workflow_id)
        return WorkflowStateDTO.from_domain(state)

    async def list_recent(self, limit: int = 20) -> List[WorkflowSummaryDTO]:
        states = await self.workflow_repository.list_recent(limit)
        return [WorkflowSummaryDTO.from_domain(state) for state in states]

    async def _get_state(self, workflow_id: UUID) -> WorkflowState:
        state = await self.workflow_repository.get_by_id(workflow_id)
        if state is None:
            raise WorkflowNotFoundError(str(workflow_id))
        return state

    async def _run_automated_stages(
        self, state: WorkflowState, on_update: Optional[ProgressCallback]
    ) -> None:
        context = await self.planning_data_repository.load_context()
        available_budget = self._available_budget(state, context)
        state.available_budget = available_budget
        state.budget_context = context.budget_summary().describe()

        state.add_message(
            AgentRole.DEMAND,
            f"Working with {state.policy.conservatism_level.value} risk level and "
            f"{_money(available_budget)} budget. Starting analysis...",
        )
        await self._publish(state, on_update)

        state.demand_results = await self._analyze_demand(state, context)
        high_confidence = sum(
            1 for result in state.demand_results if result.confidence > HIGH_CONFIDENCE
        )
        state.add_message(
            AgentRole.DEMAND,
            f"Analyzed {len(state.demand_results)} items with forecast data and "
            f"confidence intervals. {high_confidence} have high confidence (>70%). "
            "Ready for purchasing optimization.",
        )
        await self._publish(state, on_update)

        proposed = self._size_orders(state, context)
        budget_outcome = self.constraint_engine.apply_budget(proposed, available_budget)
        if budget_outcome.dropped:
            logger.info("workflow.budget.dropped", item_ids=budget_outcome.dropped)
        state.plan = Plan(
            items=budget_outcome.items,
            rationale=(
                "Newsvendor policy applied with weekly budget constraint of "
                f"{_money(available_budget)}"
            ),
        )
        state.add_message(
            AgentRole.PURCHASING,
            f"Applied newsvendor policy. Generated plan: {_money(budget_outcome.total_cost)} "
            f"for {budget_outcome.total_units} units within {_money(available_budget)} "
            "weekly budget.",
        )
        await self._publish(state, on_update)

        capacity = context.warehouse_capacity(self.warehouse_id)
        capacity_outcome = self.constraint_engine.apply_capacity(state.plan.items, capacity)
        if capacity_outcome.clamped or capacity_outcome.dropped:
            logger.info(
                "workflow.capacity.applied",
                warehouse_id=self.warehouse_id,
                capacity=capacity,
                clamped=capacity_outcome.clamped,
                dropped=capacity_outcome.dropped,
            )
        state.plan = Plan(
            items=capacity_outcome.items,
            rationale=f"Warehouse capacity constraints applied (max {capacity:g} units)",
        )
        state.add_message(
            AgentRole.RISK,
            f"Applied warehouse capacity constraints. Final plan: "
            f"{_money(capacity_outcome.total_cost)} for {capacity_outcome.total_units} "
            f"units within {capacity:g} unit capacity.",
        )
        await self._publish(state, on_update)

        flagged = items_requiring_review(state.plan, context)
        if flagged:
            names = ", ".join(item.item_name for item in flagged)
            state.add_message(
                AgentRole.RISK,
                f"Holding cost exceeds shortage cost for {names}. "
                "Awaiting human review and input.",
            )
            state.request_review(state.plan)
            logger.info(
                "workflow.review.requested",
                item_ids=[item.item_id for item in flagged],
            )
            await self._publish(state, on_update)
            return

        await self._finalize(state, feedback=None)
        await self._publish(state, on_update)

    async def _analyze_demand(
        self, state: WorkflowState, context: PlanningContext
    ) -> List[DemandResult]:
        latest = context.latest_forecasts()
        results: List[DemandResult] = []

        for item_id in state.item_ids:
            record = latest.get(item_id)
            if record is None:
                logger.warning("workflow.demand.no_forecast", item_id=item_id)
                state.messages.append(f"No forecast found for {item_id}; item skipped.")
                continue
            try:
                if not record.is_finite:
                    raise NonFiniteDemandError(record.forecast, record.ci_low, record.ci_high)
                result = await self.demand_analyzer.analyze(
                    record,
                    state.policy,
                    item_name=context.name_for(record),
                    history=context.history_for(item_id),
                )
            except NonFiniteDemandError as exc:
                logger.warning(
                    "workflow.demand.non_finite_forecast", item_id=item_id, **exc.details
                )
                state.messages.append(f"Forecast for {item_id} is not finite; item skipped.")
                continue
            results.append(result)
        return results

    def _size_orders(self, state: WorkflowState, context: PlanningContext) -> List[PlanItem]:
        proposed: List[PlanItem] = []

        for result in state.demand_results:
            cost = context.cost_for(result.item_id)
            if cost is None:
                logger.warning(
                    "workflow.purchasing.no_cost_data",
                    item_id=result.item_id,
                    product_id=product_key(result.item_id),
                )
                continue

            try:
                quantity = self.inventory_planner.optimal_quantity(
                    mean=result.forecast,
                    ci_low=result.ci_low,
                    ci_high=result.ci_high,
                    holding_cost=cost.holding_cost,
                    shortage_cost=cost.shortage_cost,
                )
            except DegenerateCriticalRatioError as exc:
                logger.warning(
                    "workflow.purchasing.degenerate_ratio",
                    item_id=result.item_id,
                    **exc.details,
                )
                state.messages.append(f"{result.item_name} excluded: {exc.message}")
                state.add_message(
                    AgentRole.PURCHASING,
                    f"Excluded {result.item_name}: its cost parameters leave no "
                    "meaningful order quantity. Please review the SKU cost table.",
                )
                continue
            except NonFiniteDemandError as exc:
                logger.warning(
                    "workflow.purchasing.non_finite_quantity",
                    item_id=result.item_id,
                    **exc.details,
                )
                state.messages.append(f"{result.item_name} excluded: {exc.message}")
                continue

            proposed.append(
                PlanItem(
                    item_id=result.item_id,
                    item_name=result.item_name,
                    quantity=quantity,
                    unit_cost=self.inventory_planner.purchasing_price(cost.shortage_cost),
                )
            )
        return proposed

    async def _process_feedback(
        self,
        state: WorkflowState,
        feedback: HumanInput,
        on_update: Optional[ProgressCallback],
    ) -> None:
        logger.info(
            "workflow.feedback.received",
            chars=len(feedback.feedback),
            overrides=len(feedback.item_overrides),
        )

        acknowledgement = await self.reasoner.acknowledge_feedback(
            self._plan_facts(state, feedback.feedback)
        )
        state.add_message(AgentRole.RISK, acknowledgement)

        result = self.feedback_reconciler.reconcile(state.plan or Plan(), feedback.feedback)
        state.plan = result.plan
        for adjustment in result.adjustments:
            agent, template = _ADJUSTMENT_MESSAGES[adjustment.rule]
            state.add_message(
                agent,
                template.format(
                    percent=adjustment.reduction_percent,
                    total=_money(adjustment.total_cost_after),
                ),
            )
        if not result.modified:
            state.add_message(
                AgentRole.PURCHASING,
                "Thank you for the feedback. We'll keep the current plan but will "
                "monitor these concerns closely.",
            )
        await self._publish(state, on_update)

        await self._finalize(state, feedback=feedback.feedback)
        await self._publish(state, on_update)

    async def _finalize(self, state: WorkflowState, feedback: Optional[str]) -> None:
        assessment = await self.reasoner.assess_plan(self._plan_facts(state, feedback))
        state.add_message(AgentRole.RISK, assessment)
        state.add_message(
            AgentRole.DEMAND,
            "Final plan approved with human input incorporated."
            if feedback is not None
            else "Supply planning output finalized.",
        )
        state.complete()
        logger.info(
            "workflow.completed",
            items=len(state.plan.items) if state.plan else 0,
            total_cost=state.plan.total_cost if state.plan else 0.0,
            reviewed=feedback is not None,
        )

    @staticmethod
    def _plan_facts(state: WorkflowState, feedback: Optional[str]) -> PlanFacts:
        plan = state.plan or Plan()
        return PlanFacts(
            item_count=len(plan.items),
            total_cost=plan.total_cost,
            total_units=plan.total_units,
            available_budget=state.available_budget or 0.0,
            conservatism_level=state.policy.conservatism_level.value,
            budget_context=state.budget_context,
            feedback=feedback,
        )

    @staticmethod
    def _available_budget(state: WorkflowState, context: PlanningContext) -> float:
        if state.policy.max_cost is not None:
            return state.policy.max_cost
        return context.current_budget()

    async def _publish(
        self,
        state: WorkflowState,
        on_update: Optional[ProgressCallback],
        expected_status: Optional[WorkflowStatus] = None,
    ) -> None:
        await self.workflow_repository.update(state, expected_status=expected_status)
        if on_update is None:
            return
        result = on_update(WorkflowStateDTO.from_domain(state))
        if inspect.isawaitable(result):
            await result


class GetBudgetContextUseCase:
    """Use case for reading the budget and capacity a new run would start from."""

    def __init__(
        self,
        planning_data_repository: IPlanningDataRepository,
        warehouse_id: int = DEFAULT_WAREHOUSE_ID,
    ):
        self.planning_data_repository = planning_data_repository
        self.warehouse_id = warehouse_id

    async def execute(self) -> BudgetContextDTO:
        context = await self.planning_data_repository.load_context()
        summary = context.budget_summary()
        return BudgetContextDTO(
            current_budget=summary.current,
            average_budget=summary.average,
            budget_trend=summary.trend,
            has_budget_history=summary.has_history,
            warehouse_id=self.warehouse_id,
            warehouse_capacity=context.warehouse_capacity(self.warehouse_id),
            summary=summary.describe(),
        )
