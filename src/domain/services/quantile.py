"""Inverse of the standard normal CDF (Acklam's rational approximation).

Relative error is below 1.15e-9 over the open interval (0, 1); no
refinement step is applied.
"""

import math
from typing import Sequence

_A = (
    -3.969683028665376e01,
    2.209460984245205e02,
    -2.759285104469687e02,
    1.383577518672690e02,
    -3.066479806614201e01,
    2.506628277459239e00,
)
_B = (
    -5.447609879822406e01,
    1.615858368580409e02,
    -1.556989798598866e02,
    6.680131188771972e01,
    -1.328068155288572e01,
)
_C = (
    -7.784894002430293e-03,
    -3.223964580411365e-01,
    -2.400758277161838e00,
    -2.549732539343734e00,
    4.374664141464968e00,
    2.938163982698783e00,
)
_D = (
    7.784695709041462e-03,
    3.224671290700398e-01,
    2.445134137142996e00,
    3.754408661907416e00,
)

P_LOW = 0.02425
P_HIGH = 1.0 - P_LOW


def _horner(coefficients: Sequence[float], x: float) -> float:
    result = 0.0
    for coefficient in coefficients:
        result = result * x + coefficient
    return result


def _tail(p: float) -> float:
    q = math.sqrt(-2.0 * math.log(p))
    return _horner(_C, q) / (_horner(_D, q) * q + 1.0)


def normal_quantile(p: float) -> float:
    """Return z such that Phi(z) == p for the standard normal distribution.

    Args:
        p: Probability. Values at or below 0 map to -inf, at or above 1 to +inf.

    Raises:
        ValueError: If p is NaN.
    """
    if math.isnan(p):
        raise ValueError("Probability must be a number")
    if p <= 0.0:
        return -math.inf
    if p >= 1.0:
        return math.inf

    if p < P_LOW:
        return _tail(p)
    if p > P_HIGH:
        return -_tail(1.0 - p)

    q = p - 0.5
    r = q * q
    return _horner(_A, r) * q / (_horner(_B, r) * r + 1.0)
