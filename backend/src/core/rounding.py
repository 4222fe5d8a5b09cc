"""Rounding helpers for kcal arithmetic.

Python's round() uses banker's rounding; calorie figures shown to users
round halves up (1734.5 -> 1735), so every derivation goes through here.
"""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return math.floor(value + 0.5)
