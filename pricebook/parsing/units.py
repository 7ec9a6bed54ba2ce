"""Numeric and unit normalization for receipt quantities and prices."""

from __future__ import annotations

import math
import re

# Canonical unit symbol for each family of spellings.
# Patterns are anchored so that at most one can match a given token.
_UNIT_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"^gal(?:lon)?s?\.?$"), "gal"),
    (re.compile(r"^(?:lbs?|pounds?|#)\.?$"), "lb"),
    (re.compile(r"^(?:kgs?|kilos?|kilogram(?:me)?s?)\.?$"), "kg"),
    (re.compile(r"^(?:oz|ozs|ounces?)\.?$"), "oz"),
    (re.compile(r"^(?:l|ltrs?|lit(?:er|re)s?)\.?$"), "l"),
    (re.compile(r"^(?:ml|mls|millilit(?:er|re)s?)\.?$"), "ml"),
    (re.compile(r"^(?:ct|cnt|counts?|pcs?|pieces?|pks?|packs?|ea|each)\.?$"), "ct"),
]

# unit -> (multiplier, base unit)
_BASE_UNITS: dict[str, tuple[float, str]] = {
    "lb": (16.0, "oz"),
    "kg": (1000.0, "g"),
    "ml": (0.001, "l"),
    "gal": (3.785, "l"),
}

_NON_NUMERIC = re.compile(r"[^\d.]")


def to_number(raw) -> float | None:
    """Parse a noisy token such as "$4.99" or " 12.401gal" into a float.

    Everything except digits and "." is dropped before parsing.
    Returns None for missing, empty or garbled input.
    """
    if raw is None or isinstance(raw, bool):
        return None
    cleaned = _NON_NUMERIC.sub("", str(raw))
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def normalize_unit(raw) -> str:
    """Map a unit spelling to its canonical symbol.

    Unknown units are returned lower-cased and trimmed, so the function is
    idempotent.
    """
    if raw is None:
        return ""
    unit = str(raw).strip().lower()
    if not unit:
        return ""
    for pattern, symbol in _UNIT_PATTERNS:
        if pattern.match(unit):
            return symbol
    return unit


def to_base_quantity(qty: float, unit: str) -> tuple[float, str]:
    """Convert a quantity to its comparison base (oz, g, l or itself)."""
    multiplier, base_unit = _BASE_UNITS.get(unit, (1.0, unit))
    return qty * multiplier, base_unit


def format_number(value: float, places: int) -> str:
    """Round and drop trailing zeros: 2.5000 -> "2.5", 3.0 -> "3"."""
    text = f"{round(value, places):.{places}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def compute_unit_price(total, qty, unit) -> str | None:
    """Return "<price> $/<base unit>" or None when it cannot be computed.

    Example: total=8.0, qty=1, unit="lb" -> "0.5 $/oz"
    """
    if total is None or qty is None:
        return None
    try:
        total = float(total)
        qty = float(qty)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(total) or not math.isfinite(qty) or qty <= 0:
        return None

    unit = normalize_unit(unit)
    if not unit:
        return None

    base_qty, base_unit = to_base_quantity(qty, unit)
    if base_qty <= 0:
        return None
    return f"{format_number(total / base_qty, 4)} $/{base_unit}"


def unit_price_value(unit_price: str | None) -> float | None:
    """Extract the numeric part of a formatted unit price string."""
    if not unit_price:
        return None
    head = unit_price.split("$", 1)[0]
    return to_number(head)
