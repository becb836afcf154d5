import math


def clamp(value: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, value))


def round_half_up(value: float, digits: int = 0) -> float:
    """Half-up rounding to ``digits`` decimals (the built-in ``round`` is half-even)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor
