"""
Decision Rule
=============

Weighted threshold deciding whether a scored item becomes a signal.

Each unit of weight above 1.0 lowers the threshold by 0.1 and each unit
below raises it. The adjusted threshold is not clamped: a large weight can
push it to or below 0 (always trigger), a weight of 0 raises it by 0.1.
"""

WEIGHT_STEP = 0.1


def adjusted_threshold(weight: float = 1.0, base_threshold: float = 0.8) -> float:
    return base_threshold - (weight - 1.0) * WEIGHT_STEP


def should_trigger(score: float, weight: float = 1.0, base_threshold: float = 0.8) -> bool:
    """True if score meets the weight-adjusted threshold."""
    return score >= adjusted_threshold(weight, base_threshold)
