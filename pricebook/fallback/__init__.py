"""Text-understanding fallback: base class, result type, and factory."""

from __future__ import annotations

import enum
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import PricebookConfig

logger = logging.getLogger(__name__)

INSTRUCTION = "extract items"

SYSTEM_PROMPT = (
    "You are a specialized assistant that extracts and formats grocery item "
    'data from receipt text. The request is a JSON object with an "instruction" '
    'and the receipt "text". For each item, return the name, total price, '
    "quantity, and unit. If a field is not found, use null. Respond with a "
    'JSON object of the form {"items": [{"name": ..., "priceTotal": ..., '
    '"qtyValue": ..., "qtyUnit": ...}]}. DO NOT include any other text.'
)


def build_request(text: str) -> dict:
    return {"instruction": INSTRUCTION, "text": text}


def build_user_prompt(text: str) -> str:
    """Serialize the request sent as the user message."""
    return json.dumps(build_request(text), ensure_ascii=False)


class FallbackStatus(enum.Enum):
    OK = "ok"
    TIMED_OUT = "timed_out"
    UNAVAILABLE = "unavailable"


@dataclass
class FallbackResult:
    status: FallbackStatus
    items: list[dict] = field(default_factory=list)

    @classmethod
    def ok(cls, items: list[dict]) -> FallbackResult:
        return cls(FallbackStatus.OK, items)

    @classmethod
    def timed_out(cls) -> FallbackResult:
        return cls(FallbackStatus.TIMED_OUT)

    @classmethod
    def unavailable(cls) -> FallbackResult:
        return cls(FallbackStatus.UNAVAILABLE)


class TextFallback(ABC):
    """Abstract base for model-backed receipt item extraction."""

    @property
    @abstractmethod
    def configured(self) -> bool:
        """True when the backend has what it needs to make a request."""

    @abstractmethod
    async def extract_items(self, text: str) -> FallbackResult:
        """Send the receipt text and return raw item dicts.

        Must not raise for timeouts, transport errors or bad responses;
        those are reported through the result status.
        """
        ...


def parse_items_response(text: str | None) -> list[dict]:
    """Parse a model response into a list of item dicts.

    Accepts {"items": [...]} or a bare list, optionally wrapped in markdown
    fences. Anything else yields an empty list.
    """
    if not text:
        return []
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = [l for l in lines[1:] if not l.strip().startswith("```")]
        cleaned = "\n".join(lines)

    try:
        data = json.loads(cleaned)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Fallback response is not valid JSON")
        return []

    if isinstance(data, dict):
        data = data.get("items")
    if not isinstance(data, list):
        logger.warning("Fallback response has no item list")
        return []
    return [item for item in data if isinstance(item, dict)]


def create_fallback(config: PricebookConfig) -> TextFallback | None:
    """Create the configured fallback backend, or None when disabled."""
    fb = config.fallback
    backend_name = (fb.backend or "none").lower()

    match backend_name:
        case "none":
            return None
        case "openai":
            from .openai import OpenAIFallback

            return OpenAIFallback(
                api_key=fb.openai.api_key,
                model=fb.openai.model,
                timeout=fb.timeout,
            )
        case "claude":
            from .claude import ClaudeFallback

            return ClaudeFallback(
                api_key=fb.claude.api_key,
                model=fb.claude.model,
                timeout=fb.timeout,
            )
        case "gemini":
            from .gemini import GeminiFallback

            return GeminiFallback(
                api_key=fb.gemini.api_key,
                model=fb.gemini.model,
                timeout=fb.timeout,
            )
        case _:
            raise ValueError(
                f"Unknown fallback backend: {backend_name!r} "
                f"(choose openai / claude / gemini / none)"
            )
