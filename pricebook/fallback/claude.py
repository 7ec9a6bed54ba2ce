"""Anthropic Claude fallback."""

from __future__ import annotations

import logging

from . import SYSTEM_PROMPT, FallbackResult, TextFallback, build_user_prompt, parse_items_response

logger = logging.getLogger(__name__)


class ClaudeFallback(TextFallback):
    """Extract receipt items with Claude."""

    def __init__(
        self,
        api_key: str = "",
        model: str = "claude-sonnet-4-5-20250929",
        timeout: float = 30.0,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def extract_items(self, text: str) -> FallbackResult:
        if not self._api_key:
            return FallbackResult.unavailable()

        try:
            import anthropic
        except ImportError:
            logger.warning("anthropic SDK is not installed: pip install 'pricebook[claude]'")
            return FallbackResult.unavailable()

        client = anthropic.AsyncAnthropic(
            api_key=self._api_key, timeout=self._timeout, max_retries=0
        )
        try:
            response = await client.messages.create(
                model=self._model,
                max_tokens=4096,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": build_user_prompt(text)}],
            )
        except anthropic.APITimeoutError:
            logger.warning("Claude request timed out after %.0fs", self._timeout)
            return FallbackResult.timed_out()
        except anthropic.AnthropicError as e:
            logger.warning("Claude request failed: %s", e)
            return FallbackResult.unavailable()

        text_blocks = [b.text for b in response.content if getattr(b, "type", "text") == "text"]
        return FallbackResult.ok(parse_items_response("".join(text_blocks)))
