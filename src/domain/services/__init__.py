"""
Domain Services Package

Pure planning logic: normal quantile, demand analysis, newsvendor sizing,
budget/capacity filters, the human-review gate and feedback reconciliation.
"""

from .constraint_engine import ConstraintEngine, ConstraintOutcome
from .demand_analyzer import DemandAnalyzer, confidence_tier, fallback_explanation
from .feedback_reconciler import (
    FeedbackAdjustment,
    FeedbackReconciler,
    FeedbackRule,
    ReconciliationResult,
)
from .inventory_planner import InventoryPlanner
from .quantile import normal_quantile
from .review_gate import items_requiring_review, requires_human_review

__all__ = [
    "ConstraintEngine",
    "ConstraintOutcome",
    "DemandAnalyzer",
    "FeedbackAdjustment",
    "FeedbackReconciler",
    "FeedbackRule",
    "InventoryPlanner",
    "ReconciliationResult",
    "confidence_tier",
    "fallback_explanation",
    "items_requiring_review",
    "normal_quantile",
    "requires_human_review",
]
