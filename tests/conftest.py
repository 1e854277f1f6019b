from __future__ import annotations

import sys
from datetime import date
from pathlib import Path
from typing import List

import pytest

from src.domain.entities.planning_data import (
    BudgetRecord,
    CapacityRecord,
    CostEntry,
    ForecastRecord,
    PlanningContext,
)
from src.domain.gateways.reasoner import DemandFacts, IReasoner, PlanFacts

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

LATEST = date(2024, 1, 8)

# Item 101: no review, q=3 at $15. Item 102: no review, q=12 at $20.
# Item 103: holding > shortage, q=6 at $13. Item 104: degenerate cost row.
ITEM_A = "1/11/101"
ITEM_B = "1/11/102"
ITEM_C = "1/11/103"
ITEM_DEGENERATE = "1/11/104"


def make_forecast(
    item_id: str,
    forecast: float,
    ci_low: float,
    ci_high: float,
    *,
    day: date = LATEST,
    confidence: float | None = 0.8,
) -> ForecastRecord:
    return ForecastRecord(
        item_id=item_id,
        date=day,
        forecast=forecast,
        ci_low=ci_low,
        ci_high=ci_high,
        confidence_score=confidence,
        client=1,
        warehouse=11,
        product=int(item_id.rsplit("/", 1)[-1]),
    )


class StubReasoner(IReasoner):
    """Reasoner returning fixed text and recording the facts it was given."""

    def __init__(self) -> None:
        self.demand_calls: List[DemandFacts] = []
        self.plan_calls: List[PlanFacts] = []
        self.feedback_calls: List[PlanFacts] = []

    async def explain_demand(self, facts: DemandFacts) -> str:
        self.demand_calls.append(facts)
        return f"explained {facts.item_name}"

    async def assess_plan(self, facts: PlanFacts) -> str:
        self.plan_calls.append(facts)
        return "plan assessed"

    async def acknowledge_feedback(self, facts: PlanFacts) -> str:
        self.feedback_calls.append(facts)
        return "feedback acknowledged"


class StubPlanningDataRepository:
    def __init__(self, context: PlanningContext) -> None:
        self.context = context
        self.loads = 0

    async def load_context(self) -> PlanningContext:
        self.loads += 1
        return self.context


@pytest.fixture()
def planning_context() -> PlanningContext:
    return PlanningContext(
        forecasts=(
            make_forecast(ITEM_A, 2.0, 1.6, 2.4),
            make_forecast(ITEM_A, 1.5, 1.0, 2.0, day=date(2024, 1, 1), confidence=0.6),
            make_forecast(ITEM_B, 10.0, 8.0, 12.0),
            make_forecast(ITEM_C, 5.0, 4.0, 6.0, confidence=0.5),
            make_forecast(ITEM_DEGENERATE, 4.0, 3.0, 5.0),
        ),
        costs={
            "101": CostEntry("101", holding_cost=1.0, shortage_cost=5.0),
            "102": CostEntry("102", holding_cost=2.0, shortage_cost=10.0),
            "103": CostEntry("103", holding_cost=5.0, shortage_cost=3.0),
            "104": CostEntry("104", holding_cost=20.0, shortage_cost=3.0),
        },
        budgets=(
            BudgetRecord(date(2024, 1, 1), 900.0),
            BudgetRecord(LATEST, 1000.0),
        ),
        capacities=(
            CapacityRecord(LATEST, warehouse_id=11, capacity=500.0),
            CapacityRecord(LATEST, warehouse_id=12, capacity=1.0),
        ),
        item_names={ITEM_A: "Widget", ITEM_B: "Gadget", ITEM_C: "Gizmo"},
    )


@pytest.fixture()
def stub_reasoner() -> StubReasoner:
    return StubReasoner()


@pytest.fixture()
def stub_planning_repository(planning_context: PlanningContext) -> StubPlanningDataRepository:
    return StubPlanningDataRepository(planning_context)


FORECAST_HEADER = (
    "unique_id,ds,AutoARIMA,AutoARIMA-lo-99,AutoARIMA-lo-95,AutoARIMA-lo-80,"
    "AutoARIMA-hi-80,AutoARIMA-hi-95,AutoARIMA-hi-99,confidence_score,client,"
    "warehouse,product"
)


@pytest.fixture()
def planning_data_dir(tmp_path: Path) -> Path:
    """A data directory holding every planning table."""
    (tmp_path / "scored_df.csv").write_text(
        "\n".join(
            [
                FORECAST_HEADER,
                "1/11/101,2024-01-01,1.5,0.5,1.0,1.2,1.8,2.0,2.5,0.6,1,11,101",
                "1/11/101,2024-01-08,2.0,1.4,1.6,1.8,2.2,2.4,2.6,0.8,1,11,101",
                "1/11/102,2024-01-08,10,7,8,9,11,12,13,,1,11,102",
                "1/11/103,2024-01-08,5,3.5,4,4.5,5.5,6,6.5,0.5,1,11,103",
                "1/11/105,2024-01-08,n/a,1,1,1,1,1,1,0.5,1,11,105",
            ]
        )
        + "\n"
    )
    (tmp_path / "SKU_Costs.csv").write_text(
        "product,holding_cost,shortage_cost\n101,1,5\n102,2,10\n103,5,3\n106,abc,1\n"
    )
    (tmp_path / "budget_df.csv").write_text("ds,budget\n2024-01-01,900\n2024-01-08,1000\n")
    (tmp_path / "warehouse_constraints.csv").write_text(
        "ds,capacity,warehouse\n2024-01-01,400,11\n2024-01-08,500,11\n2024-01-08,50,12\n"
    )
    (tmp_path / "businesses.csv").write_text(
        "id,name,category,location,item_ids,product_names\n"
        "b1,Corner Shop,retail,Lisbon,1/11/101|1/11/102,Widget|Gadget\n"
        "b2,Depot,wholesale,Porto,1/11/103,\n"
    )
    return tmp_path
