from __future__ import annotations

import pytest

from src.domain.entities.plan import Plan, PlanItem


def test_totals_follow_current_quantities() -> None:
    plan = Plan(items=[PlanItem("a", "A", 3, 15.0), PlanItem("b", "B", 12, 20.0)])

    assert plan.total_cost == 285.0
    assert plan.total_units == 15

    plan.items[1].quantity = 10
    assert plan.total_cost == 245.0


def test_negative_quantity_rejected() -> None:
    with pytest.raises(ValueError):
        PlanItem("a", "A", -1, 1.0)


def test_copy_is_independent() -> None:
    plan = Plan(items=[PlanItem("a", "A", 3, 15.0)], rationale="r")

    clone = plan.copy()
    clone.items[0].quantity = 1

    assert plan.items[0].quantity == 3
    assert clone.rationale == "r"
    assert plan.find_item("a") is plan.items[0]
    assert plan.find_item("missing") is None
