"""
Domain Entities - Demand

Planning policy and the per-item demand assessment handed to the planner.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ConservatismLevel(str, Enum):
    """How aggressively targets are padded above the raw forecast."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class PlanningPolicy:
    """Caller-chosen policy for one workflow run."""

    conservatism_level: ConservatismLevel = ConservatismLevel.MEDIUM
    max_cost: Optional[float] = None
    """Budget cap for the run; the current budget is used when unset."""


@dataclass(frozen=True)
class DemandResult:
    """Demand assessment of one item, consumed once by the inventory planner."""

    item_id: str
    item_name: str
    forecast: float
    ci_low: float
    ci_high: float
    confidence: float
    target_quantity: int
    explanation: str
