from __future__ import annotations

from src.domain.entities.plan import Plan, PlanItem
from src.domain.entities.planning_data import CostEntry, PlanningContext
from src.domain.services.review_gate import items_requiring_review, requires_human_review


def _context() -> PlanningContext:
    return PlanningContext(
        costs={
            "1": CostEntry("1", holding_cost=5.0, shortage_cost=3.0),
            "2": CostEntry("2", holding_cost=2.0, shortage_cost=10.0),
        }
    )


def test_holding_above_shortage_requires_review() -> None:
    plan = Plan(items=[PlanItem("9/11/1", "Risky", 10, 13.0)])

    assert requires_human_review(plan, _context()) is True


def test_cheap_holding_passes() -> None:
    plan = Plan(items=[PlanItem("9/11/2", "Safe", 10, 20.0)])

    assert requires_human_review(plan, _context()) is False


def test_items_requiring_review_lists_only_flagged_lines() -> None:
    plan = Plan(
        items=[
            PlanItem("9/11/2", "Safe", 10, 20.0),
            PlanItem("9/11/1", "Risky", 4, 13.0),
            PlanItem("9/11/7", "Unknown cost", 4, 13.0),
        ]
    )

    flagged = items_requiring_review(plan, _context())

    assert [item.item_name for item in flagged] == ["Risky"]


def test_empty_plan_never_requires_review() -> None:
    assert requires_human_review(Plan(), _context()) is False
