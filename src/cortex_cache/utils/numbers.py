"""Rounding helpers."""

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to ``digits`` decimals, halves going up (2.5 -> 3, unlike round())."""
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale
