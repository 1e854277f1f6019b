"""
Reasoner implementations.

``DeterministicReasoner`` renders fixed templates from the numbers it is
given. ``LLMReasoner`` asks a text generation gateway for the same sentence
under a deadline and hands the facts to the deterministic variant whenever
the call fails or runs out of time. Neither variant can change a number.
"""

import asyncio
from typing import Optional

import structlog

from src.domain.gateways.reasoner import DemandFacts, IReasoner, PlanFacts
from src.domain.gateways.text_generation_gateway import ITextGenerationGateway
from src.domain.services.demand_analyzer import fallback_explanation
from src.shared.consts import REASONING_DEADLINE_SECONDS

logger = structlog.get_logger(__name__)


def _money(amount: float) -> str:
    return f"${amount:,.2f}"


class DeterministicReasoner(IReasoner):
    """Template-based explanations, used offline and as the LLM fallback."""

    async def explain_demand(self, facts: DemandFacts) -> str:
        return fallback_explanation(
            facts.forecast, facts.confidence, facts.target_quantity
        )

    async def assess_plan(self, facts: PlanFacts) -> str:
        if facts.total_cost <= facts.available_budget:
            budget_status = "within budget"
        else:
            overrun = facts.total_cost - facts.available_budget
            budget_status = f"exceeds budget by {_money(overrun)}"
        return (
            f"Plan for {facts.item_count} items totaling {_money(facts.total_cost)} "
            f"is {budget_status} with {facts.conservatism_level} risk approach."
        )

    async def acknowledge_feedback(self, facts: PlanFacts) -> str:
        return "Thank you for the feedback. We will incorporate your suggestions."


class LLMReasoner(IReasoner):
    """Gateway-backed explanations bounded by a per-call deadline."""

    def __init__(
        self,
        gateway: ITextGenerationGateway,
        deadline_seconds: float = REASONING_DEADLINE_SECONDS,
        fallback: Optional[IReasoner] = None,
    ):
        self._gateway = gateway
        self._deadline = deadline_seconds
        self._fallback = fallback or DeterministicReasoner()

    async def explain_demand(self, facts: DemandFacts) -> str:
        text = await self._ask(self._demand_prompt(facts), purpose="demand")
        if text is None:
            return await self._fallback.explain_demand(facts)
        return text

    async def assess_plan(self, facts: PlanFacts) -> str:
        text = await self._ask(self._plan_prompt(facts), purpose="plan")
        if text is None:
            return await self._fallback.assess_plan(facts)
        return text

    async def acknowledge_feedback(self, facts: PlanFacts) -> str:
        text = await self._ask(self._feedback_prompt(facts), purpose="feedback")
        if text is None:
            return await self._fallback.acknowledge_feedback(facts)
        return text

    async def _ask(self, prompt: str, *, purpose: str) -> Optional[str]:
        """Return generated text, or None when the deterministic text must be used."""
        try:
            return await asyncio.wait_for(
                self._gateway.generate(prompt), timeout=self._deadline
            )
        except asyncio.TimeoutError:
            logger.warning(
                "reasoning.timeout", purpose=purpose, deadline_seconds=self._deadline
            )
        except Exception as exc:
            logger.warning("reasoning.failed", purpose=purpose, error=str(exc))
        return None

    @staticmethod
    def _demand_prompt(facts: DemandFacts) -> str:
        lines = [
            f"Item: {facts.item_name}",
            f"Current Forecast: {facts.forecast:g}",
            f"Confidence: {facts.confidence * 100:.0f}%",
            f"Confidence Interval: [{facts.ci_low:.2f}, {facts.ci_high:.2f}]",
            f"Target Quantity: {facts.target_quantity}",
        ]
        if facts.as_of is not None:
            lines.append(f"Current Date: {facts.as_of.isoformat()}")

        if facts.history:
            lines.append("Historical Data (for context):")
            for point in facts.history:
                confidence = (
                    f"{point.confidence_score * 100:.0f}%"
                    if point.confidence_score is not None
                    else "n/a"
                )
                lines.append(
                    f"- {point.date.isoformat()}: {point.forecast:.2f} "
                    f"(confidence: {confidence})"
                )

        lines.append("")
        lines.append(
            "Provide a 1-sentence explanation for this demand target, "
            "considering historical trends if available."
        )
        return "\n".join(lines)

    @staticmethod
    def _plan_prompt(facts: PlanFacts) -> str:
        within = "within" if facts.total_cost <= facts.available_budget else "exceeds"
        prompt = (
            "Purchase plan summary:\n"
            f"Items: {facts.item_count}\n"
            f"Total cost: {_money(facts.total_cost)}\n"
            f"Total units: {facts.total_units}\n"
            f"Budget: {within} {_money(facts.available_budget)}\n"
            f"Policy: {facts.conservatism_level} conservatism\n"
        )
        if facts.budget_context:
            prompt += f"Budget Context: {facts.budget_context}\n"
        if facts.feedback:
            prompt += f'Reviewer feedback already applied: "{facts.feedback}"\n'
        prompt += "\nProvide a 1-2 sentence strategic assessment."
        return prompt

    @staticmethod
    def _feedback_prompt(facts: PlanFacts) -> str:
        return (
            f'Respond to this human feedback on a purchase plan: "{facts.feedback}". '
            f"The plan currently costs {_money(facts.total_cost)} for "
            f"{facts.total_units} units across {facts.item_count} items. "
            "Consider how this affects risk and procurement. Respond in 1-2 sentences."
        )
