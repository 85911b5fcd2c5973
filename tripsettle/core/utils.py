"""
Utility functions for the application.
"""
from typing import Any, Dict
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal("0.01")
ZERO = Decimal("0")
# Default context precision (28) minus the two cent places
MAX_INTEGER_DIGITS = 26


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a raw numeric field to Decimal.

    Missing, boolean, non-numeric and non-finite values all become 0 so that
    financial display never fails on incomplete data entry. So do magnitudes
    too large to carry cents.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            # str() keeps floats like 0.55 from turning into 0.55000000000000004...
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return ZERO
    if not result.is_finite() or result.adjusted() >= MAX_INTEGER_DIGITS:
        return ZERO
    return result


def round_money(value: Any) -> Decimal:
    """Round to cents, half up. Amounts too large to hold at cent precision become 0."""
    try:
        return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return ZERO.quantize(CENT)


def format_money(value: Decimal) -> str:
    """Format an amount the way the driver app shows it, e.g. ``$300.00``."""
    return f"${round_money(value):.2f}"


def format_error(message: str, details: Any = None) -> Dict[str, Any]:
    """Format error response."""
    response = {"error": message}
    if details:
        response["details"] = details
    return response
