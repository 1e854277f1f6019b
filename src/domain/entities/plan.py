"""
Domain Entities - Purchase Plan

Plan line items and the plan aggregate. Line and plan totals are derived
on read, so they always agree with the current quantities.
"""

from dataclasses import dataclass, field, replace
from typing import List, Optional


@dataclass
class PlanItem:
    """A single purchase line."""

    item_id: str
    item_name: str
    quantity: int
    unit_cost: float

    def __post_init__(self) -> None:
        if self.quantity < 0:
            raise ValueError(f"Quantity for {self.item_id} cannot be negative")

    @property
    def total_cost(self) -> float:
        return self.quantity * self.unit_cost

    def with_quantity(self, quantity: int) -> "PlanItem":
        return replace(self, quantity=quantity)


@dataclass
class Plan:
    """Ordered collection of purchase lines with a free-text rationale."""

    items: List[PlanItem] = field(default_factory=list)
    rationale: str = ""

    @property
    def total_cost(self) -> float:
        return sum(item.total_cost for item in self.items)

    @property
    def total_units(self) -> int:
        return sum(item.quantity for item in self.items)

    def find_item(self, item_id: str) -> Optional[PlanItem]:
        for item in self.items:
            if item.item_id == item_id:
                return item
        return None

    def copy(self) -> "Plan":
        """Copy with independent line items."""
        return Plan(items=[replace(item) for item in self.items], rationale=self.rationale)
