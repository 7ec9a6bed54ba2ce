"""Rule-based receipt text parsing."""

from .dates import extract_date_iso
from .fuel import FuelLimits, parse_fuel_receipt
from .generic import GenericLimits, extract_line_items, normalize_name
from .glyphs import NumericToken, fix_numeric_glyphs, parse_numeric_tokens
from .units import compute_unit_price, normalize_unit, to_number

__all__ = [
    "FuelLimits",
    "GenericLimits",
    "NumericToken",
    "compute_unit_price",
    "extract_date_iso",
    "extract_line_items",
    "fix_numeric_glyphs",
    "normalize_name",
    "normalize_unit",
    "parse_fuel_receipt",
    "parse_numeric_tokens",
    "to_number",
]
