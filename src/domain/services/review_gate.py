"""Decides whether a plan must pause for human review."""

from typing import List

from src.domain.entities.plan import Plan, PlanItem
from src.domain.entities.planning_data import PlanningContext


def holding_risk_exceeds_shortage(item: PlanItem, context: PlanningContext) -> bool:
    """True when carrying this line costs more than running short of it.

    Items without a cost entry never qualify.
    """
    cost = context.cost_for(item.item_id)
    if cost is None:
        return False
    return item.quantity * cost.holding_cost > item.quantity * cost.shortage_cost


def items_requiring_review(plan: Plan, context: PlanningContext) -> List[PlanItem]:
    return [item for item in plan.items if holding_risk_exceeds_shortage(item, context)]


def requires_human_review(plan: Plan, context: PlanningContext) -> bool:
    return any(holding_risk_exceeds_shortage(item, context) for item in plan.items)
