"""Budget and warehouse-capacity filters applied to proposed plan lines."""

from dataclasses import dataclass, field
from typing import List, Sequence

from src.domain.entities.plan import PlanItem


@dataclass
class ConstraintOutcome:
    """Lines that survived a filter plus the ids it dropped or clamped."""

    items: List[PlanItem] = field(default_factory=list)
    dropped: List[str] = field(default_factory=list)
    clamped: List[str] = field(default_factory=list)

    @property
    def total_cost(self) -> float:
        return sum(item.total_cost for item in self.items)

    @property
    def total_units(self) -> int:
        return sum(item.quantity for item in self.items)


class ConstraintEngine:
    """Sequential plan filters.

    Both filters keep the caller's order. The budget filter is a greedy
    ledger, so a different order can admit a different subset of items.
    """

    @staticmethod
    def apply_budget(
        items: Sequence[PlanItem], available_budget: float
    ) -> ConstraintOutcome:
        """Admit items in order while the running total stays within budget.

        An item that does not fit is dropped whole; later, cheaper items can
        still be admitted.
        """
        outcome = ConstraintOutcome()
        running_total = 0.0

        for item in items:
            if running_total + item.total_cost <= available_budget:
                outcome.items.append(item)
                running_total += item.total_cost
            else:
                outcome.dropped.append(item.item_id)

        return outcome

    @staticmethod
    def apply_capacity(items: Sequence[PlanItem], capacity: float) -> ConstraintOutcome:
        """Clamp each line to the warehouse capacity; drop empty lines."""
        outcome = ConstraintOutcome()

        for item in items:
            quantity = int(min(item.quantity, capacity))
            if quantity <= 0:
                outcome.dropped.append(item.item_id)
                continue
            if quantity < item.quantity:
                outcome.clamped.append(item.item_id)
            outcome.items.append(item.with_quantity(quantity))

        return outcome
