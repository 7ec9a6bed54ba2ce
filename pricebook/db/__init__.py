"""SQLite storage for parsed line items."""

from .history import PriceHistoryDB, PricePoint
from .schema import ensure_schema

__all__ = [
    "PriceHistoryDB",
    "PricePoint",
    "ensure_schema",
]
