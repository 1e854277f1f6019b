"""
Domain Gateway - Reasoner

Capability that turns numeric planning facts into short explanation text.
Two variants exist (deterministic templates and an LLM-backed one); callers
depend only on this interface and must behave identically in every numeric
output whichever variant is active.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Tuple


@dataclass(frozen=True)
class HistoryPoint:
    date: date
    forecast: float
    confidence_score: Optional[float] = None


@dataclass(frozen=True)
class DemandFacts:
    """Numbers behind one item's demand target."""

    item_name: str
    forecast: float
    ci_low: float
    ci_high: float
    confidence: float
    target_quantity: int
    as_of: Optional[date] = None
    history: Tuple[HistoryPoint, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PlanFacts:
    """Numbers behind a purchase plan."""

    item_count: int
    total_cost: float
    total_units: int
    available_budget: float
    conservatism_level: str
    budget_context: str = ""
    feedback: Optional[str] = None


class IReasoner(ABC):
    """Interface for the explanation-text capability."""

    @abstractmethod
    async def explain_demand(self, facts: DemandFacts) -> str:
        """One-sentence explanation of a demand target."""
        pass

    @abstractmethod
    async def assess_plan(self, facts: PlanFacts) -> str:
        """One or two sentence assessment of a finalized plan."""
        pass

    @abstractmethod
    async def acknowledge_feedback(self, facts: PlanFacts) -> str:
        """Short response to reviewer feedback (facts.feedback is set)."""
        pass
