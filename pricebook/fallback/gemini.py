"""Google Gemini fallback."""

from __future__ import annotations

import asyncio
import logging

from . import SYSTEM_PROMPT, FallbackResult, TextFallback, build_user_prompt, parse_items_response

logger = logging.getLogger(__name__)


class GeminiFallback(TextFallback):
    """Extract receipt items with Google Gemini."""

    def __init__(
        self, api_key: str = "", model: str = "gemini-2.0-flash", timeout: float = 30.0
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
            import google.generativeai as genai
        except ImportError:
            logger.warning(
                "google-generativeai SDK is not installed: pip install 'pricebook[gemini]'"
            )
            return FallbackResult.unavailable()

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(self._model, system_instruction=SYSTEM_PROMPT)

        try:
            response = await asyncio.wait_for(
                model.generate_content_async(
                    build_user_prompt(text),
                    generation_config={"response_mime_type": "application/json"},
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Gemini request timed out after %.0fs", self._timeout)
            return FallbackResult.timed_out()
        except Exception as e:
            # google.api_core errors, or ValueError for a blocked prompt
            logger.warning("Gemini request failed: %s", e)
            return FallbackResult.unavailable()

        try:
            content = response.text
        except ValueError:
            logger.warning("Gemini response has no text part")
            return FallbackResult.ok([])
        return FallbackResult.ok(parse_items_response(content))
