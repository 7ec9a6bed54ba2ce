"""TOML configuration loader for pricebook."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .parsing.fuel import DEFAULT_NOISE_WORDS, FuelLimits
from .parsing.generic import DEFAULT_EXCLUDED_WORDS, GenericLimits

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

DEFAULT_CHAR_WHITELIST = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789.$:/#-() "
)


@dataclass
class OCRConfig:
    lang: str = "eng"
    psm: int = 6
    scale: float = 2.0
    threshold: int = 190
    char_whitelist: str = DEFAULT_CHAR_WHITELIST


@dataclass
class OpenAIFallbackConfig:
    api_key: str = ""
    model: str = "gpt-4o"


@dataclass
class ClaudeFallbackConfig:
    api_key: str = ""
    model: str = "claude-sonnet-4-5-20250929"


@dataclass
class GeminiFallbackConfig:
    api_key: str = ""
    model: str = "gemini-2.0-flash"


@dataclass
class FallbackConfig:
    backend: str = "openai"
    timeout: float = 30.0
    openai: OpenAIFallbackConfig = field(default_factory=OpenAIFallbackConfig)
    claude: ClaudeFallbackConfig = field(default_factory=ClaudeFallbackConfig)
    gemini: GeminiFallbackConfig = field(default_factory=GeminiFallbackConfig)


@dataclass
class ParserConfig:
    use_generic: bool = True
    fuel: FuelLimits = field(default_factory=FuelLimits)
    generic: GenericLimits = field(default_factory=GenericLimits)


@dataclass
class DatabaseConfig:
    path: str = "~/.config/pricebook/history.db"


@dataclass
class PricebookConfig:
    ocr: OCRConfig = field(default_factory=OCRConfig)
    fallback: FallbackConfig = field(default_factory=FallbackConfig)
    parser: ParserConfig = field(default_factory=ParserConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


def load_config(path: str | Path | None = None) -> PricebookConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    API keys can be overridden via environment variables.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    ocr = raw.get("ocr", {})
    fbk = raw.get("fallback", {})
    prs = raw.get("parser", {})
    dbs = raw.get("database", {})

    openai_cfg = fbk.get("openai", {})
    claude_cfg = fbk.get("claude", {})
    gemini_cfg = fbk.get("gemini", {})
    fuel_cfg = prs.get("fuel", {})
    generic_cfg = prs.get("generic", {})

    # Resolve API keys: config file → environment variable
    openai_api_key = openai_cfg.get("api_key", "") or os.environ.get(
        "OPENAI_API_KEY", ""
    )
    claude_api_key = claude_cfg.get("api_key", "") or os.environ.get(
        "ANTHROPIC_API_KEY", ""
    )
    gemini_api_key = gemini_cfg.get("api_key", "") or os.environ.get(
        "GEMINI_API_KEY", ""
    )

    fuel_defaults = FuelLimits()
    generic_defaults = GenericLimits()

    return PricebookConfig(
        ocr=OCRConfig(
            lang=ocr.get("lang", "eng"),
            psm=ocr.get("psm", 6),
            scale=ocr.get("scale", 2.0),
            threshold=ocr.get("threshold", 190),
            char_whitelist=ocr.get("char_whitelist", DEFAULT_CHAR_WHITELIST),
        ),
        fallback=FallbackConfig(
            backend=fbk.get("backend", "openai"),
            timeout=fbk.get("timeout", 30.0),
            openai=OpenAIFallbackConfig(
                api_key=openai_api_key,
                model=openai_cfg.get("model", "gpt-4o"),
            ),
            claude=ClaudeFallbackConfig(
                api_key=claude_api_key,
                model=claude_cfg.get("model", "claude-sonnet-4-5-20250929"),
            ),
            gemini=GeminiFallbackConfig(
                api_key=gemini_api_key,
                model=gemini_cfg.get("model", "gemini-2.0-flash"),
            ),
        ),
        parser=ParserConfig(
            use_generic=prs.get("use_generic", True),
            fuel=FuelLimits(
                price_min=fuel_cfg.get("price_min", fuel_defaults.price_min),
                price_max=fuel_cfg.get("price_max", fuel_defaults.price_max),
                gallons_min=fuel_cfg.get("gallons_min", fuel_defaults.gallons_min),
                gallons_max=fuel_cfg.get("gallons_max", fuel_defaults.gallons_max),
                window_before=fuel_cfg.get("window_before", fuel_defaults.window_before),
                window_after=fuel_cfg.get("window_after", fuel_defaults.window_after),
                noise_words=tuple(fuel_cfg.get("noise_words", DEFAULT_NOISE_WORDS)),
            ),
            generic=GenericLimits(
                price_min=generic_cfg.get("price_min", generic_defaults.price_min),
                price_max=generic_cfg.get("price_max", generic_defaults.price_max),
                min_line_length=generic_cfg.get(
                    "min_line_length", generic_defaults.min_line_length
                ),
                min_name_length=generic_cfg.get(
                    "min_name_length", generic_defaults.min_name_length
                ),
                excluded_words=tuple(
                    generic_cfg.get("excluded_words", DEFAULT_EXCLUDED_WORDS)
                ),
            ),
        ),
        database=DatabaseConfig(
            path=dbs.get("path", "~/.config/pricebook/history.db"),
        ),
    )
