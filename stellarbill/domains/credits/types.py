"""Pure credit arithmetic.

Usage is converted to credits with exact rational arithmetic so that
divisible amounts never pick up an extra credit from float rounding.
"""

from decimal import Decimal
from fractions import Fraction
from math import ceil
from typing import Optional, Union

Number = Union[int, Decimal, str]


def calculate_credits(
    raw_amount: Number,
    unit_divisor: Optional[int] = None,
    units_per_credit: Optional[int] = None,
) -> int:
    """Whole credits consumed by ``raw_amount`` units of usage.

    ``ceil((raw_amount / unit_divisor) / units_per_credit)`` where a missing
    (or zero) divisor or units-per-credit counts as 1. A partial unit
    consumes a full credit.

    >>> calculate_credits(1000, unit_divisor=10)
    100
    >>> calculate_credits(1005, unit_divisor=10)
    101
    """
    raw = Fraction(Decimal(str(raw_amount)))
    if raw < 0:
        raise ValueError("Usage amount cannot be negative")
    divisor = Fraction(unit_divisor) if unit_divisor else Fraction(1)
    per_credit = Fraction(units_per_credit) if units_per_credit else Fraction(1)
    if divisor < 0 or per_credit < 0:
        raise ValueError("unit_divisor and units_per_credit must be positive")
    return ceil(raw / divisor / per_credit)
