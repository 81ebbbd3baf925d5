import math


def round_score(value: float) -> int:
    """Round half-up (2.5 -> 3), unlike Python's banker's rounding."""
    return int(math.floor(value + 0.5))


def clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, value))
