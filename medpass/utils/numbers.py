"""Lenient numeric parsing for server and user supplied values"""

import math
from typing import Any, Optional


def to_number(value: Any) -> Optional[float]:
    """Finite float from a number or numeric string, else None"""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number
