from __future__ import annotations

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with .5 going up (2.5 -> 3, -2.5 -> -2), unlike the builtin round()."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor
