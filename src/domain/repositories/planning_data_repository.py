"""
Domain Repository Interface - Planning Data

Source of the forecast, cost, budget and capacity tables.
"""

from abc import ABC, abstractmethod

from src.domain.entities.planning_data import PlanningContext


class IPlanningDataRepository(ABC):
    """Interface for loading planning input tables."""

    @abstractmethod
    async def load_context(self) -> PlanningContext:
        """
        Load a fresh, immutable snapshot of every planning table.

        Malformed numeric rows are filtered out before they reach the
        snapshot. Missing tables produce empty collections so that the
        fallback budget and capacity apply.

        Raises:
            PlanningDataError: When a table exists but cannot be parsed
        """
        pass
