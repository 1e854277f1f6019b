from __future__ import annotations

from src.domain.entities.plan import PlanItem
from src.domain.services.constraint_engine import ConstraintEngine


def _item(item_id: str, quantity: int, unit_cost: float) -> PlanItem:
    return PlanItem(item_id=item_id, item_name=item_id, quantity=quantity, unit_cost=unit_cost)


def test_budget_admits_items_in_order_until_exhausted() -> None:
    items = [_item("a", 3, 100), _item("b", 1, 300), _item("c", 5, 100)]

    outcome = ConstraintEngine.apply_budget(items, 650)

    assert [item.item_id for item in outcome.items] == ["a", "b"]
    assert outcome.dropped == ["c"]
    assert outcome.total_cost == 600


def test_budget_later_cheaper_item_can_still_fit() -> None:
    items = [_item("a", 1, 500), _item("b", 1, 400), _item("c", 1, 100)]

    outcome = ConstraintEngine.apply_budget(items, 600)

    assert [item.item_id for item in outcome.items] == ["a", "c"]
    assert outcome.dropped == ["b"]


def test_budget_exact_fit_is_admitted() -> None:
    outcome = ConstraintEngine.apply_budget([_item("a", 2, 50)], 100)

    assert outcome.items and not outcome.dropped


def test_budget_order_changes_admitted_subset() -> None:
    big, small = _item("big", 1, 80), _item("small", 1, 30)

    first = ConstraintEngine.apply_budget([big, small], 100)
    second = ConstraintEngine.apply_budget([small, big], 100)

    assert [item.item_id for item in first.items] == ["big"]
    assert [item.item_id for item in second.items] == ["small"]


def test_capacity_clamps_each_line() -> None:
    outcome = ConstraintEngine.apply_capacity([_item("a", 150, 2), _item("b", 40, 2)], 100)

    assert [item.quantity for item in outcome.items] == [100, 40]
    assert outcome.clamped == ["a"]
    assert outcome.total_units == 140


def test_capacity_drops_lines_that_become_empty() -> None:
    outcome = ConstraintEngine.apply_capacity([_item("a", 5, 1), _item("b", 0, 1)], 0.5)

    assert outcome.items == []
    assert outcome.dropped == ["a", "b"]


def test_capacity_does_not_mutate_input_lines() -> None:
    original = _item("a", 150, 2)

    ConstraintEngine.apply_capacity([original], 10)

    assert original.quantity == 150
