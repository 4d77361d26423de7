"""
Rating scale conversion.

Upstream channels score on a 10-point scale; every view in the dashboard
reports on a 5-point scale.
"""

import math
from typing import Iterable, Optional


def round_to(value: Optional[float], decimals: int = 1) -> Optional[float]:
    """
    Round half away from zero at the given decimal precision.

    round_to(4.25) -> 4.3, round_to(None) -> None. Python's built-in round()
    uses banker's rounding, which would report 4.2 here.
    """
    if value is None:
        return None
    factor = 10 ** decimals
    scaled = math.floor(abs(value) * factor + 0.5)
    return math.copysign(scaled / factor, value) if scaled else 0.0


def to_five_point(rating10: Optional[float]) -> Optional[float]:
    """Convert a 10-point rating to the 5-point scale (1 decimal). None stays None."""
    if rating10 is None:
        return None
    return round_to(rating10 / 2, 1)


def average(values: Iterable[float]) -> Optional[float]:
    """Arithmetic mean, or None for an empty input."""
    values = list(values)
    if not values:
        return None
    return sum(values) / len(values)
