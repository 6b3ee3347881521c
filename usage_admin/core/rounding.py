"""
Rounding helpers shared by the generators and the metrics calculator.

Display figures round half up (2.5 -> 3), not to even.
"""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity."""
    return int(math.floor(value + 0.5))


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))
