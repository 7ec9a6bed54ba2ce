"""Tests for pricebook config loading."""

import os
import tempfile

from pricebook.config import PricebookConfig, load_config
from pricebook.parsing.fuel import DEFAULT_NOISE_WORDS


def _load_toml(content: bytes) -> PricebookConfig:
    with tempfile.NamedTemporaryFile(suffix=".toml", delete=False) as f:
        f.write(content)
        f.flush()
        config = load_config(f.name)
    os.unlink(f.name)
    return config


def test_load_config_defaults(monkeypatch):
    """Loading with no path returns all defaults."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    config = load_config()
    assert isinstance(config, PricebookConfig)
    assert config.ocr.lang == "eng"
    assert config.ocr.psm == 6
    assert config.ocr.scale == 2.0
    assert config.ocr.threshold == 190
    assert "$" in config.ocr.char_whitelist
    assert config.fallback.backend == "openai"
    assert config.fallback.timeout == 30.0
    assert config.fallback.openai.model == "gpt-4o"
    assert config.fallback.openai.api_key == ""
    assert config.parser.use_generic is True
    assert config.parser.fuel.price_min == 1.0
    assert config.parser.fuel.gallons_max == 50.0
    assert config.parser.fuel.noise_words == DEFAULT_NOISE_WORDS
    assert config.parser.generic.price_max == 5000.0
    assert config.database.path.endswith("history.db")


def test_load_config_nonexistent_file():
    """Loading a nonexistent file returns defaults."""
    config = load_config("/nonexistent/path.toml")
    assert config.ocr.psm == 6
    assert config.fallback.backend == "openai"


def test_load_config_from_toml():
    """Loading a valid TOML file populates config."""
    config = _load_toml(b"""\
[ocr]
lang = "eng+fra"
psm = 4
threshold = 170

[fallback]
backend = "gemini"
timeout = 10

[fallback.gemini]
api_key = "test-key-123"
model = "gemini-pro"

[database]
path = "/var/pricebook/history.db"
""")

    assert config.ocr.lang == "eng+fra"
    assert config.ocr.psm == 4
    assert config.ocr.threshold == 170
    assert config.fallback.backend == "gemini"
    assert config.fallback.timeout == 10
    assert config.fallback.gemini.api_key == "test-key-123"
    assert config.fallback.gemini.model == "gemini-pro"
    assert config.database.path == "/var/pricebook/history.db"


def test_load_config_env_override(monkeypatch):
    """Environment variables override empty API keys."""
    monkeypatch.setenv("OPENAI_API_KEY", "env-openai-key")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "env-anthropic-key")
    monkeypatch.setenv("GEMINI_API_KEY", "env-gemini-key")

    config = load_config()
    assert config.fallback.openai.api_key == "env-openai-key"
    assert config.fallback.claude.api_key == "env-anthropic-key"
    assert config.fallback.gemini.api_key == "env-gemini-key"


def test_load_config_file_key_takes_precedence(monkeypatch):
    """Config file API key takes precedence over env var."""
    monkeypatch.setenv("OPENAI_API_KEY", "env-key")

    config = _load_toml(b"""\
[fallback.openai]
api_key = "file-key"
""")
    assert config.fallback.openai.api_key == "file-key"


def test_load_config_parser_limits():
    """Parser thresholds can be tuned per section."""
    config = _load_toml(b"""\
[parser]
use_generic = false

[parser.fuel]
price_max = 12.5
gallons_max = 80
noise_words = ["total", "change"]

[parser.generic]
min_name_length = 2
excluded_words = ["tax"]
""")

    assert config.parser.use_generic is False
    assert config.parser.fuel.price_max == 12.5
    assert config.parser.fuel.price_min == 1.0
    assert config.parser.fuel.gallons_max == 80
    assert config.parser.fuel.noise_words == ("total", "change")
    assert config.parser.generic.min_name_length == 2
    assert config.parser.generic.excluded_words == ("tax",)
    assert config.parser.generic.price_min == 0.01


def test_load_config_partial_toml():
    """Partial TOML uses defaults for missing sections."""
    config = _load_toml(b"""\
[ocr]
psm = 11
""")
    assert config.ocr.psm == 11
    # Other sections use defaults
    assert config.fallback.backend == "openai"
    assert config.parser.fuel.window_before == 2
    assert config.parser.fuel.window_after == 4
