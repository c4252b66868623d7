"""
Utility functions for the application.
"""
from typing import Any, Dict, Union
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from giftbuddy.core.config import settings
from giftbuddy.core.exceptions import LedgerValidationError

# Largest amount an Integer money column holds (signed 32-bit)
MAX_SUBUNITS = 2147483647


def round_half_up(value: Decimal) -> int:
    """Round a decimal to the nearest integer, halves away from zero."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_subunits(amount: Union[Decimal, int, float, str]) -> int:
    """Convert a major-unit amount (rupees) to integer subunits (paise)."""
    try:
        subunits = round_half_up(Decimal(str(amount)) * settings.SUBUNITS_PER_UNIT)
    except InvalidOperation:
        raise LedgerValidationError(f"Invalid amount: {amount}")
    ensure_storable(subunits)
    return subunits


def ensure_storable(subunits: int) -> int:
    """Reject amounts that do not fit the money columns."""
    if subunits > MAX_SUBUNITS:
        raise LedgerValidationError(
            f"Amount exceeds the maximum of {MAX_SUBUNITS} subunits"
        )
    return subunits


def percentage(part: int, whole: int) -> int:
    """Whole-number percentage of part over whole, 0 when whole is 0."""
    if whole == 0:
        return 0
    return round_half_up(Decimal(part) * 100 / Decimal(whole))


def format_error(message: str, code: str) -> Dict[str, Any]:
    """Format error response."""
    return {"error": message, "code": code}
