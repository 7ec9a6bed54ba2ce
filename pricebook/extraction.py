"""Receipt extraction pipeline.

Strategies run in order and the first one that yields items wins:

1. fuel receipt parser (authoritative once it matches)
2. text-understanding fallback, when configured
3. generic line extractor
4. the "Unparsed Receipt" placeholder
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from .fallback import FallbackStatus, TextFallback
from .models import LineItem, unparsed_item
from .parsing.dates import extract_date_iso
from .parsing.fuel import FuelLimits, parse_fuel_receipt
from .parsing.generic import GenericLimits, extract_line_items, normalize_name
from .parsing.units import compute_unit_price, normalize_unit, to_number

if TYPE_CHECKING:
    from .config import PricebookConfig

logger = logging.getLogger(__name__)

_NAME_KEYS = ("name", "item", "description", "product")
_PRICE_KEYS = ("priceTotal", "price_total", "price", "total")
_QTY_KEYS = ("qtyValue", "qty_value", "quantity", "qty")
_UNIT_KEYS = ("qtyUnit", "qty_unit", "unit")


def _first(raw: dict, keys: tuple[str, ...]):
    for key in keys:
        value = raw.get(key)
        if value not in (None, ""):
            return value
    return None


def _valid_iso_date(value) -> str | None:
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()[:10]).isoformat()
    except ValueError:
        return None


def normalize_item(raw: dict, default_date: str) -> LineItem:
    """Turn a loosely-shaped item dict into a LineItem.

    Missing names become "Item", numbers are cleaned with to_number, units
    are canonicalized and the unit price is recomputed.
    """
    name = normalize_name(str(_first(raw, _NAME_KEYS) or "")) or "Item"
    price = to_number(_first(raw, _PRICE_KEYS))
    qty = to_number(_first(raw, _QTY_KEYS))
    if qty is not None and qty <= 0:
        qty = None
    unit = normalize_unit(_first(raw, _UNIT_KEYS))

    return LineItem(
        name=name,
        price_total=price,
        qty_value=qty,
        qty_unit=unit,
        unit_price=compute_unit_price(price, qty, unit),
        date=_valid_iso_date(raw.get("date")) or default_date,
    )


class ReceiptExtractor:
    """Turns OCR text into a non-empty list of line items."""

    def __init__(
        self,
        fallback: TextFallback | None = None,
        *,
        fuel_limits: FuelLimits | None = None,
        generic_limits: GenericLimits | None = None,
        use_generic: bool = True,
    ) -> None:
        self._fallback = fallback
        self._fuel_limits = fuel_limits or FuelLimits()
        self._generic_limits = generic_limits or GenericLimits()
        self._use_generic = use_generic

    @classmethod
    def from_config(
        cls, config: PricebookConfig, fallback: TextFallback | None = None
    ) -> ReceiptExtractor:
        return cls(
            fallback,
            fuel_limits=config.parser.fuel,
            generic_limits=config.parser.generic,
            use_generic=config.parser.use_generic,
        )

    @property
    def fallback_available(self) -> bool:
        return self._fallback is not None and self._fallback.configured

    async def extract(self, text: str) -> list[LineItem]:
        """Run every strategy in turn; never raises and never returns []."""
        text = text or ""
        receipt_date = extract_date_iso(text)

        fuel_items = parse_fuel_receipt(text, self._fuel_limits)
        if fuel_items:
            logger.info("Parsed as fuel receipt")
            return fuel_items

        items = await self._run_fallback(text, receipt_date)
        if items:
            logger.info("Fallback returned %d item(s)", len(items))
            return items

        if self._use_generic:
            items = extract_line_items(text, self._generic_limits)
            if items:
                logger.info("Generic extractor returned %d item(s)", len(items))
                return items

        logger.info("No items found, returning placeholder")
        return [unparsed_item(receipt_date)]

    def extract_offline(self, text: str) -> list[LineItem]:
        """Rule-based strategies only; for callers without an event loop."""
        text = text or ""
        fuel_items = parse_fuel_receipt(text, self._fuel_limits)
        if fuel_items:
            return fuel_items
        if self._use_generic:
            items = extract_line_items(text, self._generic_limits)
            if items:
                return items
        return [unparsed_item(extract_date_iso(text))]

    async def _run_fallback(self, text: str, receipt_date: str) -> list[LineItem]:
        if not self.fallback_available or not text.strip():
            return []

        try:
            result = await self._fallback.extract_items(text)
        except Exception:
            logger.exception("Fallback raised, continuing without it")
            return []
        if result.status is not FallbackStatus.OK:
            logger.warning("Fallback %s, continuing without it", result.status.value)
            return []

        items: list[LineItem] = []
        for raw in result.items:
            if not isinstance(raw, dict):
                continue
            items.append(normalize_item(raw, receipt_date))
        return items
