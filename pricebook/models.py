"""Data models for parsed receipt line items."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

MAX_NAME_LENGTH = 60

SENTINEL_NAME = "Unparsed Receipt"


@dataclass(frozen=True)
class LineItem:
    """A single normalized line parsed from a receipt."""

    name: str
    price_total: float | None = None
    qty_value: float | None = None
    qty_unit: str = ""  # gal, lb, kg, oz, l, ml, ct or ""
    unit_price: str | None = None  # e.g. "0.3118 $/oz"
    date: str = ""  # YYYY-MM-DD

    @property
    def is_sentinel(self) -> bool:
        return self.name == SENTINEL_NAME

    def to_dict(self) -> dict:
        """Return the JSON shape used by the CLI and the fallback contract."""
        return {
            "name": self.name,
            "priceTotal": self.price_total,
            "qtyValue": self.qty_value,
            "qtyUnit": self.qty_unit,
            "unitPrice": self.unit_price,
            "date": self.date,
        }


def unparsed_item(item_date: str | None = None) -> LineItem:
    """Placeholder row returned when nothing could be extracted."""
    return LineItem(
        name=SENTINEL_NAME,
        date=item_date or date.today().isoformat(),
    )
