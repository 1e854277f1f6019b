"""Rule-based reconciliation of reviewer feedback into a revised plan.

Rules are applied in order over the same lines, each reading the quantity
left by the previous one, so reductions compound:

1. budget concern   ("budget", "cost", "expensive")       x0.85, x0.7 with "very"
2. risk concern     ("risk", "conservative", "safe")      x0.9,  x0.75 with "very"
3. named item       (item name or id appears in the text) x0.7
4. fallback         (only if nothing above changed)       x0.95

Every step floors the result and never goes below one unit. Applying the
same feedback twice reduces the plan twice.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List

import structlog

from src.domain.entities.plan import Plan, PlanItem

logger = structlog.get_logger(__name__)

BUDGET_KEYWORDS = ("budget", "cost", "expensive")
RISK_KEYWORDS = ("risk", "conservative", "safe")
INTENSIFIER = "very"

BUDGET_FACTOR = 0.85
BUDGET_FACTOR_STRONG = 0.7
RISK_FACTOR = 0.9
RISK_FACTOR_STRONG = 0.75
NAMED_ITEM_FACTOR = 0.7
FALLBACK_FACTOR = 0.95


class FeedbackRule(str, Enum):
    BUDGET = "budget"
    RISK = "risk"
    NAMED_ITEM = "named_item"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class FeedbackAdjustment:
    """A rule that changed at least one quantity."""

    rule: FeedbackRule
    factor: float
    item_ids: List[str]
    total_cost_after: float
    total_units_after: int

    @property
    def reduction_percent(self) -> int:
        return round((1 - self.factor) * 100)


@dataclass
class ReconciliationResult:
    plan: Plan
    original_total_cost: float
    original_total_units: int
    adjustments: List[FeedbackAdjustment] = field(default_factory=list)

    @property
    def modified(self) -> bool:
        return bool(self.adjustments)


def reduce_quantity(quantity: int, factor: float) -> int:
    return max(1, math.floor(quantity * factor))


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def _mentioned(item: PlanItem, text: str) -> bool:
    name = item.item_name.lower()
    item_id = item.item_id.lower()
    return bool(name and name in text) or bool(item_id and item_id in text)


class FeedbackReconciler:
    """Maps free-form reviewer text to deterministic quantity reductions."""

    def reconcile(self, plan: Plan, feedback: str) -> ReconciliationResult:
        """Return a revised copy of the plan; the input plan is left untouched."""
        revised = plan.copy()
        result = ReconciliationResult(
            plan=revised,
            original_total_cost=plan.total_cost,
            original_total_units=plan.total_units,
        )
        text = feedback.lower()

        if _contains_any(text, BUDGET_KEYWORDS):
            factor = BUDGET_FACTOR_STRONG if INTENSIFIER in text else BUDGET_FACTOR
            self._apply(result, FeedbackRule.BUDGET, factor, revised.items)

        if _contains_any(text, RISK_KEYWORDS):
            factor = RISK_FACTOR_STRONG if INTENSIFIER in text else RISK_FACTOR
            self._apply(result, FeedbackRule.RISK, factor, revised.items)

        mentioned = [item for item in revised.items if _mentioned(item, text)]
        if mentioned:
            self._apply(result, FeedbackRule.NAMED_ITEM, NAMED_ITEM_FACTOR, mentioned)

        if not result.modified:
            self._apply(result, FeedbackRule.FALLBACK, FALLBACK_FACTOR, revised.items)

        revised.rationale = (
            "Plan modified based on human feedback. "
            f"Original: ${result.original_total_cost:,.2f}, "
            f"{result.original_total_units} units. "
            f"Modified: ${revised.total_cost:,.2f}, {revised.total_units} units."
        )

        logger.info(
            "feedback.reconciled",
            rules=[adjustment.rule.value for adjustment in result.adjustments],
            original_total_cost=result.original_total_cost,
            new_total_cost=revised.total_cost,
            original_total_units=result.original_total_units,
            new_total_units=revised.total_units,
        )
        return result

    def _apply(
        self,
        result: ReconciliationResult,
        rule: FeedbackRule,
        factor: float,
        targets: List[PlanItem],
    ) -> None:
        changed: List[str] = []
        for item in targets:
            quantity = reduce_quantity(item.quantity, factor)
            if quantity != item.quantity:
                item.quantity = quantity
                changed.append(item.item_id)

        if changed:
            result.adjustments.append(
                FeedbackAdjustment(
                    rule=rule,
                    factor=factor,
                    item_ids=changed,
                    total_cost_after=result.plan.total_cost,
                    total_units_after=result.plan.total_units,
                )
            )
