"""Demand analysis: confidence scoring and policy-adjusted targets."""

import math
from typing import Optional, Sequence

import structlog

from src.domain.entities.demand import ConservatismLevel, DemandResult, PlanningPolicy
from src.domain.entities.errors import NonFiniteDemandError
from src.domain.entities.planning_data import ForecastRecord
from src.domain.gateways.reasoner import DemandFacts, HistoryPoint, IReasoner

logger = structlog.get_logger(__name__)

MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 0.95

_POLICY_MULTIPLIERS = {
    ConservatismLevel.HIGH: 1.3,
    ConservatismLevel.MEDIUM: 1.15,
    ConservatismLevel.LOW: 1.0,
}


def _clamp_confidence(value: float) -> float:
    return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, value))


def confidence_tier(confidence: float) -> str:
    if confidence > 0.7:
        return "high"
    if confidence > 0.4:
        return "medium"
    return "low"


def fallback_explanation(forecast: float, confidence: float, target: int) -> str:
    """Deterministic explanation used whenever no reasoning text is available."""
    if target > forecast:
        adjustment = "increased"
    elif target < forecast:
        adjustment = "decreased"
    else:
        adjustment = "maintained"
    return (
        f"Target {adjustment} to {target} units based on "
        f"{confidence_tier(confidence)} confidence forecast of {forecast:g}."
    )


class DemandAnalyzer:
    """Turns forecast records into DemandResults."""

    def __init__(self, reasoner: IReasoner):
        self._reasoner = reasoner

    @staticmethod
    def confidence(record: ForecastRecord) -> float:
        """Confidence in [0.1, 0.95].

        Uses the record's own score when present, otherwise derives one from
        the interval width relative to the forecast magnitude.
        """
        score = record.confidence_score
        if score is not None and not math.isnan(score):
            return _clamp_confidence(score)

        width = record.ci_high - record.ci_low
        derived = 1.0 - width / max(record.forecast, 1.0)
        if math.isnan(derived):
            return MIN_CONFIDENCE
        return _clamp_confidence(derived)

    @staticmethod
    def target_quantity(
        record: ForecastRecord, confidence: float, policy: PlanningPolicy
    ) -> int:
        """Legacy policy target, ceil(forecast x multiplier).

        A negative forecast gives a negative target; it is reported, never ordered.
        """
        multiplier = _POLICY_MULTIPLIERS.get(policy.conservatism_level, 1.0)

        if confidence < 0.5:
            multiplier *= 1.2
        elif confidence > 0.8:
            multiplier *= 0.9

        target = record.forecast * multiplier
        if not math.isfinite(target):
            raise NonFiniteDemandError(record.forecast, record.ci_low, record.ci_high)
        return math.ceil(target)

    async def analyze(
        self,
        record: ForecastRecord,
        policy: PlanningPolicy,
        *,
        item_name: Optional[str] = None,
        history: Sequence[ForecastRecord] = (),
    ) -> DemandResult:
        confidence = self.confidence(record)
        target = self.target_quantity(record, confidence, policy)
        name = item_name or record.display_name

        facts = DemandFacts(
            item_name=name,
            forecast=record.forecast,
            ci_low=record.ci_low,
            ci_high=record.ci_high,
            confidence=confidence,
            target_quantity=target,
            as_of=record.date,
            history=tuple(
                HistoryPoint(
                    date=past.date,
                    forecast=past.forecast,
                    confidence_score=past.confidence_score,
                )
                for past in history
            ),
        )
        explanation = await self._reasoner.explain_demand(facts)

        logger.debug(
            "demand.item.analyzed",
            item_id=record.item_id,
            confidence=round(confidence, 4),
            target_quantity=target,
        )

        return DemandResult(
            item_id=record.item_id,
            item_name=name,
            forecast=record.forecast,
            ci_low=record.ci_low,
            ci_high=record.ci_high,
            confidence=confidence,
            target_quantity=target,
            explanation=explanation,
        )
