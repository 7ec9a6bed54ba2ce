"""Rule-based parser for pump-style fuel receipts.

Fuel receipts print the pump number, gallons and price per gallon close
together with no trailing price to anchor on, so the generic line parser
misreads them. This parser looks for the known "Pump N ... Gallons ...
Price ..." layout in a small window of lines and validates every number
against fixed sanity ranges.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache

from ..models import LineItem
from .dates import extract_date_iso
from .glyphs import GLYPH_DIGIT, parse_glyph_number

logger = logging.getLogger(__name__)

FUEL_ITEM_NAME = "Fuel (Regular)"
TOTAL_ITEM_NAME = "Total"

# Words marking lines whose numbers are never the per-gallon price.
DEFAULT_NOISE_WORDS: tuple[str, ...] = (
    "total", "amount", "regular", "product", "sale", "approved",
    "visa", "mastercard", "master card", "amex", "discover", "debit",
    "credit", "card", "auth", "trans", "tran#", "ref", "seq", "invoice",
)


@dataclass
class FuelLimits:
    """Sanity windows for fuel receipts.

    Calibrated on US pump receipts; other layouts may need different values.
    """

    price_min: float = 1.0
    price_max: float = 10.0
    gallons_min: float = 2.0  # exclusive
    gallons_max: float = 50.0
    window_before: int = 2
    window_after: int = 4
    noise_words: tuple[str, ...] = field(default_factory=lambda: DEFAULT_NOISE_WORDS)

    def price_ok(self, value: float) -> bool:
        return self.price_min <= value <= self.price_max

    def gallons_ok(self, value: float) -> bool:
        return self.gallons_min < value <= self.gallons_max


@dataclass
class FuelReading:
    """Numbers recovered from a fuel receipt before item assembly."""

    price: float
    gallons: float
    total: float
    date: str


# A price above this next to gallons below the other bound means the two
# readings were swapped.
_SWAP_PRICE_ABOVE = 10.0
_SWAP_GALLONS_BELOW = 5.0

_NON_PRINTABLE = re.compile(r"[^\x20-\x7E\n]")

_DOLLAR_AMOUNT = re.compile(
    rf"\$\s*({GLYPH_DIGIT}+\.{GLYPH_DIGIT}{{1,3}})(?![0-9A-Za-z])"
)
_LABELED_PRICE = re.compile(
    rf"price[^0-9$\n]{{0,12}}\$?\s*({GLYPH_DIGIT}+\.{GLYPH_DIGIT}{{1,3}})(?![0-9A-Za-z])",
    re.I,
)
_GALLONS_DECIMAL = re.compile(
    rf"(?<![0-9A-Za-z.])({GLYPH_DIGIT}{{1,2}}\.{GLYPH_DIGIT}{{3}})(?![0-9A-Za-z])"
)
_GALLONS_NO_POINT = re.compile(r"(?<![0-9A-Za-z.])(\d{4,5})(?![0-9A-Za-z.])")
_DOLLAR_BEFORE = re.compile(r"\$\s*$")
_TOTAL_SALE = re.compile(
    rf"total\s*sale\s*[:\-]?\s*\$?\s*({GLYPH_DIGIT}+\.{GLYPH_DIGIT}{{2}})", re.I
)


def strip_non_printable(text: str) -> str:
    """Drop everything outside printable ASCII, keeping newlines."""
    return _NON_PRINTABLE.sub("", text)


@lru_cache(maxsize=8)
def _noise_pattern(words: tuple[str, ...]) -> re.Pattern:
    return re.compile(r"\b(?:" + "|".join(re.escape(w) for w in words) + ")", re.I)


def _is_noise(line: str, limits: FuelLimits) -> bool:
    return bool(_noise_pattern(tuple(limits.noise_words)).search(line))


def find_anchor_index(lines: list[str]) -> int | None:
    """Index of the first "pump" line, else the first "gallon" line."""
    for keyword in ("pump", "gallon"):
        for i, line in enumerate(lines):
            if keyword in line.lower():
                return i
    return None


def candidate_window(lines: list[str], anchor: int, limits: FuelLimits) -> list[str]:
    start = max(0, anchor - limits.window_before)
    end = min(len(lines), anchor + limits.window_after + 1)
    return lines[start:end]


def _has_digit(raw: str) -> bool:
    return any(ch.isdigit() for ch in raw)


def find_price_strict(lines: list[str], limits: FuelLimits | None = None) -> float | None:
    """Find the price per gallon.

    Candidates are "$"-prefixed or "price"-labeled amounts with 1-3
    decimals and at least one real digit. Only values inside the price
    window are accepted and the smallest wins.
    """
    limits = limits or FuelLimits()
    candidates: list[float] = []
    for line in lines:
        if _is_noise(line, limits):
            continue
        for pattern in (_DOLLAR_AMOUNT, _LABELED_PRICE):
            for m in pattern.finditer(line):
                if not _has_digit(m.group(1)):
                    continue
                value = parse_glyph_number(m.group(1))
                if value is None or not limits.price_ok(value):
                    continue
                candidates.append(value)

    if not candidates:
        return None
    return min(candidates)


def find_gallons_strict(lines: list[str], limits: FuelLimits | None = None) -> float | None:
    """Find the gallons pumped.

    OCR often drops the decimal point, so a bare 4-5 digit integer is read
    as thousandths ("12401" -> 12.401). Three-decimal readings are preferred;
    among equals the largest wins since gallons outgrow the other numbers
    printed next to it.
    """
    limits = limits or FuelLimits()
    precise: list[float] = []
    rough: list[float] = []
    for line in lines:
        lower = line.lower()
        if _is_noise(line, limits):
            continue
        if "pump" not in lower and "gallon" not in lower:
            continue

        for m in _GALLONS_DECIMAL.finditer(line):
            if _DOLLAR_BEFORE.search(line[:m.start()]) or not _has_digit(m.group(1)):
                continue
            value = parse_glyph_number(m.group(1))
            if value is not None and limits.gallons_ok(value):
                precise.append(value)

        for m in _GALLONS_NO_POINT.finditer(line):
            if _DOLLAR_BEFORE.search(line[:m.start()]):
                continue
            value = int(m.group(1)) / 1000
            if limits.gallons_ok(value):
                rough.append(value)

    if precise:
        return max(precise)
    if rough:
        return max(rough)
    return None


def find_total_sale(text: str) -> float | None:
    """Recover the printed "Total Sale $X" amount."""
    m = _TOTAL_SALE.search(text)
    if not m or not _has_digit(m.group(1)):
        return None
    return parse_glyph_number(m.group(1))


def read_fuel_receipt(text: str, limits: FuelLimits | None = None) -> FuelReading | None:
    """Extract price, gallons and total from a fuel receipt.

    Returns None when the text does not look like a fuel receipt or the
    numbers cannot be reconciled.
    """
    limits = limits or FuelLimits()
    cleaned = strip_non_printable(text or "")
    receipt_date = extract_date_iso(cleaned)

    lines = [line.strip() for line in cleaned.split("\n")]
    lines = [line for line in lines if line]

    anchor = find_anchor_index(lines)
    if anchor is None:
        logger.debug("No pump/gallon line found")
        return None

    window = candidate_window(lines, anchor, limits)
    price = find_price_strict(window, limits)
    gallons = find_gallons_strict(window, limits)

    if (
        price is not None
        and gallons is not None
        and price > _SWAP_PRICE_ABOVE
        and gallons < _SWAP_GALLONS_BELOW
    ):
        price, gallons = gallons, price

    printed_total = find_total_sale(cleaned)

    if price is not None and gallons is not None:
        total = round(gallons * price, 2)
    elif price is not None and printed_total is not None:
        derived = round(printed_total / price, 3)
        if not limits.gallons_ok(derived):
            logger.debug("Derived gallons %.3f out of range", derived)
            return None
        gallons = derived
        total = printed_total
    else:
        logger.debug("Fuel parse incomplete: price=%s gallons=%s", price, gallons)
        return None

    return FuelReading(price=price, gallons=gallons, total=total, date=receipt_date)


def parse_fuel_receipt(text: str, limits: FuelLimits | None = None) -> list[LineItem] | None:
    """Parse a fuel receipt into a fuel line and a total line, or None."""
    reading = read_fuel_receipt(text, limits)
    if reading is None:
        return None

    return [
        LineItem(
            name=FUEL_ITEM_NAME,
            price_total=reading.total,
            qty_value=reading.gallons,
            qty_unit="gal",
            unit_price=f"{reading.price:.3f} $/gal",
            date=reading.date,
        ),
        LineItem(
            name=TOTAL_ITEM_NAME,
            price_total=reading.total,
            date=reading.date,
        ),
    ]
