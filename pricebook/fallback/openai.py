"""OpenAI chat completions fallback."""

from __future__ import annotations

import logging

from . import SYSTEM_PROMPT, FallbackResult, TextFallback, build_user_prompt, parse_items_response

logger = logging.getLogger(__name__)


class OpenAIFallback(TextFallback):
    """Extract receipt items with an OpenAI chat model in JSON mode."""

    def __init__(self, api_key: str = "", model: str = "gpt-4o", timeout: float = 30.0) -> None:
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
            import openai
        except ImportError:
            logger.warning("openai SDK is not installed: pip install 'pricebook[openai]'")
            return FallbackResult.unavailable()

        client = openai.AsyncOpenAI(api_key=self._api_key, timeout=self._timeout, max_retries=0)
        try:
            completion = await client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(text)},
                ],
                response_format={"type": "json_object"},
            )
        except openai.APITimeoutError:
            logger.warning("OpenAI request timed out after %.0fs", self._timeout)
            return FallbackResult.timed_out()
        except openai.OpenAIError as e:
            logger.warning("OpenAI request failed: %s", e)
            return FallbackResult.unavailable()

        content = completion.choices[0].message.content if completion.choices else None
        return FallbackResult.ok(parse_items_response(content))
