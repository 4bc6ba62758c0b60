"""Input coercion and Indian identity-number patterns"""

import math
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

PAN_PATTERN = re.compile(r"[A-Z]{5}[0-9]{4}[A-Z]")
AADHAAR_PATTERN = re.compile(r"[0-9]{12}")


def to_number(value: Any) -> float:
    """
    Coerce a caller-supplied value to a float.

    Missing, boolean, non-numeric, NaN and infinite values become 0.0 so the
    calculators never raise on malformed numeric input.
    """
    number = to_optional_number(value)
    return 0.0 if number is None else number


def to_optional_number(value: Any) -> Optional[float]:
    """Like to_number, but absent or non-numeric values stay absent (None)"""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def to_int(value: Any) -> int:
    return int(to_number(value))


def to_text(value: Any) -> str:
    """None becomes an empty string, scalars their string form"""
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def round_half_up(value: float) -> int:
    """Round to the nearest whole rupee, .5 away from zero"""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def is_valid_pan(value: Any) -> bool:
    return isinstance(value, str) and PAN_PATTERN.fullmatch(value) is not None


def is_valid_aadhaar(value: Any) -> bool:
    return isinstance(value, str) and AADHAAR_PATTERN.fullmatch(value) is not None


def mask_aadhaar(value: str) -> str:
    """1234****9012"""
    if not is_valid_aadhaar(value):
        return value
    return f"{value[:4]}****{value[8:]}"
