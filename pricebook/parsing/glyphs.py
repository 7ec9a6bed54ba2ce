"""Repair OCR glyph confusions inside numeric tokens.

Receipt fonts make Tesseract mix up O/0, I/l/1, S/5 and U/4. The fix is
only safe on substrings already isolated as numbers; applied to a whole
line it would mangle product names.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_GLYPH_TABLE = str.maketrans({
    "O": "0",
    "o": "0",
    "I": "1",
    "l": "1",
    "S": "5",
    "s": "5",
    "U": "4",
    "u": "4",
})

# Character class for a digit that may have been misread as a letter.
GLYPH_DIGIT = r"[0-9OoIlSsUu]"

_NUMERIC_TOKEN = re.compile(
    rf"(?<![A-Za-z0-9.])\$?\s?({GLYPH_DIGIT}+(?:\.{GLYPH_DIGIT}+)?)(?![A-Za-z0-9])"
)


@dataclass(frozen=True)
class NumericToken:
    raw_text: str
    cleaned_text: str
    value: float
    has_decimal_point: bool
    position: int


def fix_numeric_glyphs(token: str) -> str:
    """Replace letter look-alikes with digits in a numeric token."""
    return token.translate(_GLYPH_TABLE)


def parse_glyph_number(token: str) -> float | None:
    """Glyph-correct a token and parse it, or return None."""
    cleaned = fix_numeric_glyphs(token.strip().lstrip("$").strip())
    try:
        return float(cleaned)
    except ValueError:
        return None


def parse_numeric_tokens(line: str) -> list[NumericToken]:
    """Find every number-like token in a line, left to right.

    Tokens made only of look-alike letters ("SOS", "I") are not numbers
    and are skipped; a token needs at least one real digit.
    """
    tokens: list[NumericToken] = []
    for m in _NUMERIC_TOKEN.finditer(line):
        body = m.group(1)
        if not any(ch.isdigit() for ch in body):
            continue
        cleaned = fix_numeric_glyphs(body)
        try:
            value = float(cleaned)
        except ValueError:
            continue
        tokens.append(
            NumericToken(
                raw_text=m.group(0),
                cleaned_text=cleaned,
                value=value,
                has_decimal_point="." in cleaned,
                position=m.start(),
            )
        )
    return tokens
