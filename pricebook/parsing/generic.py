"""Vendor-independent line item extraction for grocery receipts."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from ..models import MAX_NAME_LENGTH, LineItem
from .dates import extract_date_iso
from .units import compute_unit_price, normalize_unit, to_number

logger = logging.getLogger(__name__)

# Lines containing any of these words are never product lines.
DEFAULT_EXCLUDED_WORDS: tuple[str, ...] = (
    "subtotal", "sub total", "total", "tax", "change", "balance",
    "visa", "mastercard", "amex", "discover", "debit", "credit", "card",
    "cash", "payment", "tender", "approved", "auth",
    "member", "membership", "rewards", "savings", "you saved", "coupon",
    "receipt", "thank", "items sold", "cashier",
)


@dataclass
class GenericLimits:
    price_min: float = 0.01
    price_max: float = 5000.0
    min_line_length: int = 5
    min_name_length: int = 3
    excluded_words: tuple[str, ...] = field(default_factory=lambda: DEFAULT_EXCLUDED_WORDS)


@dataclass
class LineCandidate:
    """A product line before name cleanup and unit pricing."""

    name: str
    price_total: float
    qty_value: float | None = None
    qty_unit: str = ""
    multi_buy: bool = False


# "BANANAS x3 @ $0.59" / "BANANAS *3 @ 0.59"
_QTY_AT_PRICE = re.compile(
    r"^(?P<name>.+?)\s*[x*]\s*(?P<count>\d+)\s*@\s*\$?\s*(?P<each>\d+(?:\.\d+)?)",
    re.I,
)
# "COKE 12PK 2 x 3.49" with an optional printed line total after it
_COUNT_TIMES_PRICE = re.compile(
    r"^(?P<name>.+?)\s+(?P<count>\d+)\s*[x*@]\s*\$?\s*(?P<each>\d+\.\d{2})"
    r"(?:\s+\$?\d+\.\d{2})?\s*$",
    re.I,
)
# "MILK 2GAL 2% 4.99" / "EGGS $3.29 F"
_TRAILING_PRICE = re.compile(
    r"^(?P<name>.*?)(?:\s+\$?|\s*\$)(?P<price>\d+\.\d{2})(?:\s+[A-Za-z])?$"
)
_QTY_UNIT = re.compile(
    r"(?<![\w.])(?P<qty>\d+(?:\.\d+)?)\s?"
    r"(?P<unit>gallons?|gal|lbs?|kg|oz|ml|ct|pk|g|l)\b",
    re.I,
)

_PACKAGING_TOKENS = re.compile(r"\b(?:ea|pk|ct)\b", re.I)
_NAME_JUNK = re.compile(r"[^\w\s.-]")
_SPACES = re.compile(r"\s{2,}")


def normalize_name(raw: str) -> str:
    """Strip packaging abbreviations and stray punctuation from a name."""
    name = _PACKAGING_TOKENS.sub("", raw)
    name = _NAME_JUNK.sub("", name)
    name = _SPACES.sub(" ", name)
    return name.strip()[:MAX_NAME_LENGTH].strip()


def _is_excluded(line: str, limits: GenericLimits) -> bool:
    lower = line.lower()
    for word in limits.excluded_words:
        if re.search(r"\b" + re.escape(word) + r"\b", lower):
            return True
    return False


def find_quantity(line: str) -> tuple[float | None, str]:
    """Return (qty, canonical unit) for a "2GAL" / "16 oz" token in the line."""
    m = _QTY_UNIT.search(line)
    if not m:
        return None, ""
    qty = to_number(m.group("qty"))
    if qty is None or qty <= 0:
        return None, ""
    return qty, normalize_unit(m.group("unit"))


def _match_multi_buy(line: str) -> tuple[str, int, float] | None:
    for pattern in (_QTY_AT_PRICE, _COUNT_TIMES_PRICE):
        m = pattern.match(line)
        if not m:
            continue
        count = int(m.group("count"))
        each = to_number(m.group("each"))
        if count <= 0 or each is None:
            continue
        return m.group("name").strip(), count, each
    return None


def parse_line(line: str, limits: GenericLimits | None = None) -> LineCandidate | None:
    """Parse one receipt line into a candidate, or None if it is not a product."""
    limits = limits or GenericLimits()
    line = line.strip()
    if len(line) < limits.min_line_length or _is_excluded(line, limits):
        return None

    multi = _match_multi_buy(line)
    if multi is not None:
        name, count, each = multi
        price = round(count * each, 2)
        qty, unit = find_quantity(name)
        if qty is None:
            qty, unit = float(count), "ct"
        return LineCandidate(
            name=name, price_total=price, qty_value=qty, qty_unit=unit, multi_buy=True
        )

    m = _TRAILING_PRICE.match(line)
    if not m:
        return None
    name = m.group("name").strip()
    price = to_number(m.group("price"))
    if not name or price is None or price == 0:
        return None
    if not limits.price_min <= price <= limits.price_max:
        logger.debug("Price %.2f outside item window: %r", price, line)
        return None
    if len(name) < limits.min_name_length:
        return None

    qty, unit = find_quantity(name)
    return LineCandidate(name=name, price_total=price, qty_value=qty, qty_unit=unit)


def extract_line_items(text: str, limits: GenericLimits | None = None) -> list[LineItem]:
    """Best-effort item list from any receipt layout."""
    limits = limits or GenericLimits()
    receipt_date = extract_date_iso(text or "")
    items: list[LineItem] = []

    for raw_line in (text or "").split("\n"):
        candidate = parse_line(raw_line, limits)
        if candidate is None:
            continue
        items.append(
            LineItem(
                name=normalize_name(candidate.name) or "Item",
                price_total=candidate.price_total,
                qty_value=candidate.qty_value,
                qty_unit=candidate.qty_unit,
                unit_price=compute_unit_price(
                    candidate.price_total, candidate.qty_value, candidate.qty_unit
                ),
                date=receipt_date,
            )
        )

    logger.debug("Generic extractor found %d item(s)", len(items))
    return items
