"""Rounding and clamping helpers shared by the scorers and the ranker."""
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[int, float]


def round_half_away(value: Number, ndigits: int = 0) -> float:
    """Round with ties going away from zero (2.5 -> 3, -2.5 -> -3).

    Python's round() uses banker's rounding, which would turn 6.5 into 6.
    Goes through the shortest repr so that 64.95 rounds to 65.0, not 64.9.
    """
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def round_to_int(value: Number) -> int:
    return int(round_half_away(value, 0))


def clamp(value: Number, low: Number, high: Number) -> Number:
    return max(low, min(high, value))
