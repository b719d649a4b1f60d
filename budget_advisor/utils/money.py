"""Money rounding and numeric guards"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

CENT = Decimal("0.01")


def round2(value: float) -> float:
    """Round to cents, half-up on the decimal representation (2.675 -> 2.68)"""
    return float(Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP))


def finite_or_none(value: Any) -> Optional[float]:
    """Return value as float if it is a real, finite number; otherwise None.

    Booleans and numeric strings are rejected: a target must be an actual number.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return None
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        return None
    return number
