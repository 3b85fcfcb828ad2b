"""
Quadratic Vote Weighting

A vote's weight is the integer square root of the amount staked behind it.
Only perfect squares are accepted, so the weight is recovered exactly with
integer arithmetic and no rounding bias enters the tally.
"""

import math

from .errors import CalculationError, Result


def compute_weight(amount: int) -> int:
    """
    Return ``w`` such that ``w * w == amount``.

    Raises CalculationError when *amount* is not a positive perfect square.
    """
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise CalculationError(f"Vote amount {amount!r} is not a positive integer")
    weight = math.isqrt(amount)
    if weight * weight != amount:
        raise CalculationError(f"Vote amount {amount} is not a perfect square")
    return weight


def try_compute_weight(amount: int) -> Result:
    """Result-returning form of :func:`compute_weight`."""
    try:
        return Result.success(compute_weight(amount))
    except CalculationError as e:
        return Result.failure(e.kind)


def vote_cost(weight: int) -> int:
    """Stake required for a vote of the given weight."""
    if weight < 0:
        raise ValueError("Weight must be non-negative")
    return weight * weight
