"""Tests for receipt date extraction."""

from datetime import date

from pricebook.parsing.dates import extract_date_iso


def test_labeled_two_digit_year():
    assert extract_date_iso("Date: 03/15/24 10:42") == "2024-03-15"


def test_bare_four_digit_year():
    assert extract_date_iso("Printed 12/01/2023 store 55") == "2023-12-01"


def test_label_wins_over_bare_date():
    text = "12/01/2023\nDate: 03/15/24"
    assert extract_date_iso(text) == "2024-03-15"


def test_no_date_uses_today():
    assert extract_date_iso("no date here", today=date(2025, 1, 2)) == "2025-01-02"


def test_impossible_date_is_ignored():
    assert extract_date_iso("13/45/2024", today=date(2025, 1, 2)) == "2025-01-02"


def test_default_today():
    assert extract_date_iso("") == date.today().isoformat()
