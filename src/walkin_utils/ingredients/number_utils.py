"""Conversion of single amount tokens ("3", "2.5", "3/4") to numbers."""

import math
from decimal import Decimal, InvalidOperation
from typing import Optional


def parse_whole(token: str) -> Optional[int]:
    """Integer value of a token such as "2", or None."""
    try:
        return int(token)
    except ValueError:
        return None


def parse_decimal(token: str) -> Optional[float]:
    """Finite float value of a token such as "2.5" or ".5", or None.

    "nan" and "inf" are rejected even though float() accepts them.
    """
    try:
        value = float(token)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_fraction(token: str) -> Optional[float]:
    """Value of a token such as "3/4", or None if it is not a fraction.

    Raises:
        ZeroDivisionError: If the denominator is zero.
    """
    parts = token.split("/")
    if len(parts) != 2 or any(parse_whole(part) is None for part in parts):
        return None
    try:
        numerator, denominator = Decimal(parts[0]), Decimal(parts[1])
    except InvalidOperation:
        return None
    if denominator == 0:
        raise ZeroDivisionError(f"Zero denominator in {token!r}")
    return float(numerator / denominator)


def parse_quantity(token: str) -> Optional[float]:
    """Value of a fraction or decimal token, or None."""
    value = parse_fraction(token)
    if value is None:
        value = parse_decimal(token)
    return value
