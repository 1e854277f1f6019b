"""
Domain Errors

This module defines custom error classes for domain-specific exceptions.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for domain errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class WorkflowNotFoundError(DomainError):
    """Raised when a planning workflow cannot be found."""

    def __init__(self, workflow_id: str, details: Optional[Dict[str, Any]] = None):
        message = f"Workflow with ID {workflow_id} not found"
        super().__init__(message, details)


class InvalidWorkflowTransitionError(DomainError):
    """Raised when a workflow is asked to move to a state it cannot reach."""

    def __init__(
        self, current: str, target: str, details: Optional[Dict[str, Any]] = None
    ):
        message = f"Cannot transition workflow from '{current}' to '{target}'"
        super().__init__(message, {"current": current, "target": target, **(details or {})})


class DegenerateCriticalRatioError(DomainError):
    """Raised when cost parameters put the newsvendor critical ratio outside (0, 1).

    This is a configuration problem of the cost table (holding cost at or above
    the purchasing price, or a non-positive holding cost), not a demand issue.
    """

    def __init__(
        self,
        critical_ratio: float,
        holding_cost: float,
        purchasing_price: float,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.critical_ratio = critical_ratio
        message = (
            f"Critical ratio {critical_ratio:.4f} is outside (0, 1) "
            f"for holding cost {holding_cost} and purchasing price {purchasing_price}"
        )
        super().__init__(
            message,
            {
                "critical_ratio": critical_ratio,
                "holding_cost": holding_cost,
                "purchasing_price": purchasing_price,
                **(details or {}),
            },
        )


class NonFiniteDemandError(DomainError):
    """Raised when forecast inputs leave no finite order quantity."""

    def __init__(
        self,
        mean: float,
        ci_low: float,
        ci_high: float,
        details: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Forecast {mean} with interval [{ci_low}, {ci_high}] "
            "gives no finite order quantity"
        )
        super().__init__(
            message,
            {"mean": mean, "ci_low": ci_low, "ci_high": ci_high, **(details or {})},
        )


class PlanningDataError(DomainError):
    """Raised when planning input tables cannot be loaded or are malformed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
