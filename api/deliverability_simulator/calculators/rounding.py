"""Rounding helpers shared by the calculators.

Python's round() uses banker's rounding; game values round half up
(2.5 -> 3) so that results match the published game tables.
"""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity."""
    return math.floor(value + 0.5)


def round_to(value: float, places: int = 2) -> float:
    """Round half up to a fixed number of decimal places."""
    factor = 10**places
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_reputation(value: float) -> int:
    """Round and clamp a reputation value into [0, 100]."""
    return int(clamp(round_half_up(value), 0, 100))
