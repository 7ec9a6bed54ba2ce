"""Receipt date detection."""

from __future__ import annotations

import re
from datetime import date

_LABELED_DATE = re.compile(r"date\s*:?\s*(\d{1,2})/(\d{1,2})/(\d{4}|\d{2})\b", re.I)
_BARE_DATE = re.compile(r"(?<![\d/])(\d{1,2})/(\d{1,2})/(\d{4}|\d{2})(?![\d/])")


def extract_date_iso(text: str, today: date | None = None) -> str:
    """Return the receipt date as YYYY-MM-DD.

    A "Date: MM/DD/YY(YY)" label wins over a bare MM/DD/YY(YY) token.
    Two-digit years are read as 20YY. Falls back to today's date when no
    valid date is printed.
    """
    for pattern in (_LABELED_DATE, _BARE_DATE):
        for m in pattern.finditer(text or ""):
            month, day, year = m.groups()
            if len(year) == 2:
                year = "20" + year
            try:
                return date(int(year), int(month), int(day)).isoformat()
            except ValueError:
                continue
    return (today or date.today()).isoformat()
