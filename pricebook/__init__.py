"""Receipt line item extraction and price history."""

from .config import (
    DatabaseConfig,
    FallbackConfig,
    OCRConfig,
    ParserConfig,
    PricebookConfig,
    load_config,
)
from .extraction import ReceiptExtractor, normalize_item
from .fallback import FallbackResult, FallbackStatus, TextFallback, create_fallback
from .models import SENTINEL_NAME, LineItem, unparsed_item

__all__ = [
    "LineItem",
    "SENTINEL_NAME",
    "unparsed_item",
    "ReceiptExtractor",
    "normalize_item",
    "TextFallback",
    "FallbackResult",
    "FallbackStatus",
    "create_fallback",
    "PricebookConfig",
    "OCRConfig",
    "FallbackConfig",
    "ParserConfig",
    "DatabaseConfig",
    "load_config",
]
