"""Single-period newsvendor optimizer.

Demand is treated as normal with the forecast as its mean and a standard
deviation recovered from the 95% interval. The order quantity covers the
critical-ratio fractile of that distribution.
"""

import math

from src.domain.entities.errors import DegenerateCriticalRatioError, NonFiniteDemandError
from src.domain.services.quantile import normal_quantile
from src.shared.consts import PURCHASE_PRICE_MARKUP, Z_95


class InventoryPlanner:
    """Newsvendor order-quantity calculator.

    Args:
        price_markup: Added to the shortage cost to obtain the purchasing price.
        z_interval: Half-width of the forecast interval in standard deviations.
        salvage_value: Value recovered per unsold unit.
    """

    def __init__(
        self,
        price_markup: float = PURCHASE_PRICE_MARKUP,
        z_interval: float = Z_95,
        salvage_value: float = 0.0,
    ):
        if z_interval <= 0:
            raise ValueError("z_interval must be positive")
        self.price_markup = float(price_markup)
        self.z_interval = float(z_interval)
        self.salvage_value = float(salvage_value)

    def purchasing_price(self, shortage_cost: float) -> float:
        return shortage_cost + self.price_markup

    def standard_deviation(self, ci_low: float, ci_high: float) -> float:
        return (ci_high - ci_low) / (2 * self.z_interval)

    def critical_ratio(self, holding_cost: float, shortage_cost: float) -> float:
        price = self.purchasing_price(shortage_cost)
        denominator = price - self.salvage_value
        if denominator == 0:
            raise DegenerateCriticalRatioError(math.nan, holding_cost, price)
        return (price - holding_cost) / denominator

    def optimal_quantity(
        self,
        mean: float,
        ci_low: float,
        ci_high: float,
        holding_cost: float,
        shortage_cost: float,
    ) -> int:
        """Cost-minimizing order quantity, rounded up.

        Raises:
            DegenerateCriticalRatioError: When the critical ratio falls outside
                (0, 1); the quantile would be infinite.
            NonFiniteDemandError: When the forecast or its interval is not
                finite.
        """
        ratio = self.critical_ratio(holding_cost, shortage_cost)
        if not 0.0 < ratio < 1.0:
            raise DegenerateCriticalRatioError(
                ratio, holding_cost, self.purchasing_price(shortage_cost)
            )

        z = normal_quantile(ratio)
        quantity = mean + self.standard_deviation(ci_low, ci_high) * z
        if not math.isfinite(quantity):
            raise NonFiniteDemandError(mean, ci_low, ci_high)
        return math.ceil(max(0.0, quantity))
