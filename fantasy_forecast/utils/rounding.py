from __future__ import annotations

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going toward +infinity (2.5 -> 3, -2.5 -> -2).

    The builtin ``round`` uses banker's rounding, which would turn a composite
    of 84.5 into 84.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round1(value: float) -> float:
    return round_half_up(value, 1)
