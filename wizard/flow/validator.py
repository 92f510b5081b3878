"""
Per-field value rules for form steps.

Pure functions, no side effects. ``validate_field`` only knows numeric
bounds for a fixed set of keys; whether a field may be empty is decided
separately by ``required_error`` (a prior gate, see the form renderer).
"""
import math
import re
from typing import Dict, Optional, TypedDict


class FieldRule(TypedDict, total=False):
    min: float
    max: float


FIELD_RULES: Dict[str, FieldRule] = {
    "monthly_ad_spend": {"min": 0.01},
    "timeframe_days": {"min": 3, "max": 90},
    "ctr_all": {"min": 0, "max": 20},
    "cost_per_result": {"min": 0.01},
}

REQUIRED_MESSAGE = "This field is required."
INVALID_NUMBER_MESSAGE = "Please enter a valid number."


def _format_bound(value: float) -> str:
    # 0.01 -> "0.01", 3 -> "3", 20.0 -> "20"
    return f"{value:g}"


# What a browser's Number() accepts, restricted to finite values: ASCII
# decimal/exponent literals and unsigned 0x/0o/0b integers
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_RADIX_RE = re.compile(r"0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")
_RADIX_BASES = {"x": 16, "o": 8, "b": 2}


def coerce_number(raw: Optional[str]) -> Optional[float]:
    """Numeric value of a raw input string, or None when it is not a finite number.

    Blank strings count as zero, the way a browser's Number() treats them.
    """
    text = (raw or "").strip()
    if not text:
        return 0.0
    radix = _RADIX_RE.fullmatch(text)
    if radix:
        digits = radix.group(1)
        try:
            return float(int(digits[1:], _RADIX_BASES[digits[0].lower()]))
        except OverflowError:
            return None
    if not _DECIMAL_RE.fullmatch(text):
        return None
    value = float(text)
    if math.isinf(value):
        return None
    return value


def validate_field(key: str, raw_value: Optional[str]) -> str:
    """Return an error message for ``raw_value`` under ``key``'s rule, or "" when valid."""
    rule = FIELD_RULES.get(key)
    if not rule:
        return ""

    value = coerce_number(raw_value)
    if value is None:
        return INVALID_NUMBER_MESSAGE
    if "min" in rule and value < rule["min"]:
        return f"Must be at least {_format_bound(rule['min'])}."
    if "max" in rule and value > rule["max"]:
        return f"Must be {_format_bound(rule['max'])} or less."
    return ""


def required_error(required: bool, raw_value: Optional[str]) -> str:
    if required and not raw_value:
        return REQUIRED_MESSAGE
    return ""
