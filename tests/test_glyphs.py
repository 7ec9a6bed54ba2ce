"""Tests for OCR glyph correction."""

from pricebook.parsing.glyphs import (
    fix_numeric_glyphs,
    parse_glyph_number,
    parse_numeric_tokens,
)


class TestFixNumericGlyphs:
    def test_letter_lookalikes(self):
        assert fix_numeric_glyphs("l2.4O1") == "12.401"
        assert fix_numeric_glyphs("S.U9") == "5.49"
        assert fix_numeric_glyphs("o.Is") == "0.15"

    def test_digits_unchanged(self):
        assert fix_numeric_glyphs("34.71") == "34.71"

    def test_parse_glyph_number(self):
        assert parse_glyph_number("$ 2.7S9") == 2.759
        assert parse_glyph_number("abc") is None


class TestParseNumericTokens:
    def test_tokens_in_order(self):
        tokens = parse_numeric_tokens("Gallons 12.4O1 Price $2.799")
        assert [t.value for t in tokens] == [12.401, 2.799]
        assert tokens[0].raw_text == "12.4O1"
        assert tokens[0].cleaned_text == "12.401"
        assert tokens[0].position == 8
        assert tokens[1].raw_text == "$2.799"
        assert tokens[1].position == 21

    def test_decimal_flag(self):
        tokens = parse_numeric_tokens("Pump 3 Gallons 12.401")
        assert tokens[0].value == 3.0
        assert tokens[0].has_decimal_point is False
        assert tokens[1].has_decimal_point is True

    def test_words_are_not_corrected(self):
        line = "SOUP SOS 2.5O"
        tokens = parse_numeric_tokens(line)
        assert len(tokens) == 1
        assert tokens[0].raw_text == "2.5O"
        assert tokens[0].value == 2.5
        assert line == "SOUP SOS 2.5O"

    def test_letters_inside_words_ignored(self):
        assert parse_numeric_tokens("Solid Oil") == []

    def test_lone_lookalike_letter(self):
        assert parse_numeric_tokens("I") == []

    def test_empty(self):
        assert parse_numeric_tokens("") == []
