"""
Domain Entities - Planning Data

Immutable records loaded from the forecast, cost, budget and capacity tables,
and the PlanningContext snapshot that carries them through a workflow run.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from statistics import fmean
from typing import Dict, Mapping, Optional, Tuple

from src.shared.consts import DEFAULT_BUDGET, DEFAULT_WAREHOUSE_CAPACITY


def product_key(item_id: str) -> str:
    """Return the bare product id of a composite "client/warehouse/product" id."""
    return item_id.rsplit("/", 1)[-1] or item_id


@dataclass(frozen=True)
class ForecastRecord:
    """A single demand forecast for one item on one date."""

    item_id: str
    date: date
    forecast: float
    ci_low: float
    ci_high: float
    confidence_score: Optional[float] = None
    client: Optional[int] = None
    warehouse: Optional[int] = None
    product: Optional[int] = None
    name: str = ""

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.forecast, self.ci_low, self.ci_high))

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        if self.product is not None:
            return f"Product {self.product}"
        return self.item_id


@dataclass(frozen=True)
class CostEntry:
    """Per-unit holding and shortage cost for a product."""

    product_id: str
    holding_cost: float
    shortage_cost: float


@dataclass(frozen=True)
class BudgetRecord:
    date: date
    budget: float


@dataclass(frozen=True)
class CapacityRecord:
    date: date
    warehouse_id: int
    capacity: float


@dataclass(frozen=True)
class BudgetSummary:
    """Current budget with its average and change vs. the previous entry."""

    current: float
    average: float
    trend: float
    has_history: bool

    def describe(self) -> str:
        if not self.has_history:
            return "No budget data available"
        sign = "+" if self.trend > 0 else ""
        return (
            f"Current budget: ${self.current:,.0f}, Average: ${self.average:,.0f}, "
            f"Trend: {sign}{self.trend:,.0f}"
        )


@dataclass(frozen=True)
class PlanningContext:
    """Snapshot of every input table needed by one planning run.

    Loaded once per run and passed explicitly into each stage; it is never
    mutated after construction.
    """

    forecasts: Tuple[ForecastRecord, ...] = ()
    costs: Mapping[str, CostEntry] = field(default_factory=dict)
    budgets: Tuple[BudgetRecord, ...] = ()
    capacities: Tuple[CapacityRecord, ...] = ()
    item_names: Mapping[str, str] = field(default_factory=dict)
    fallback_budget: float = DEFAULT_BUDGET
    fallback_capacity: float = DEFAULT_WAREHOUSE_CAPACITY

    def cost_for(self, item_id: str) -> Optional[CostEntry]:
        """Resolve the cost entry of an item through its bare product id."""
        return self.costs.get(product_key(item_id))

    def current_budget(self) -> float:
        if not self.budgets:
            return self.fallback_budget
        return max(self.budgets, key=lambda record: record.date).budget

    def budget_summary(self) -> BudgetSummary:
        if not self.budgets:
            return BudgetSummary(
                current=self.fallback_budget,
                average=self.fallback_budget,
                trend=0.0,
                has_history=False,
            )
        ordered = sorted(self.budgets, key=lambda record: record.date)
        latest = ordered[-1].budget
        trend = latest - ordered[-2].budget if len(ordered) > 1 else 0.0
        return BudgetSummary(
            current=latest,
            average=fmean(record.budget for record in ordered),
            trend=trend,
            has_history=True,
        )

    def warehouse_capacity(self, warehouse_id: int) -> float:
        records = [c for c in self.capacities if c.warehouse_id == warehouse_id]
        if not records:
            return self.fallback_capacity
        return max(records, key=lambda record: record.date).capacity

    def latest_forecasts(self) -> Dict[str, ForecastRecord]:
        """Newest forecast record per item id."""
        latest: Dict[str, ForecastRecord] = {}
        for record in self.forecasts:
            current = latest.get(record.item_id)
            if current is None or record.date > current.date:
                latest[record.item_id] = record
        return latest

    def history_for(self, item_id: str) -> Tuple[ForecastRecord, ...]:
        """Older records of an item, newest first, excluding the latest one."""
        records = sorted(
            (r for r in self.forecasts if r.item_id == item_id),
            key=lambda record: record.date,
            reverse=True,
        )
        return tuple(records[1:])

    def name_for(self, record: ForecastRecord) -> str:
        return self.item_names.get(record.item_id) or record.display_name
