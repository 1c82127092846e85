from __future__ import annotations

import re
from typing import Optional


_LEADING_NUMBER = re.compile(r"(\d[\d,.]*)(?:\s*([KkMm])\b)?")


def parse_count(value) -> Optional[int]:
    """Parse the first number out of decorated text.

    Handles '12 mutual connections', '1,204 reactions', '1.2K', '500+'.
    Returns None for unparsable inputs.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    m = _LEADING_NUMBER.search(text)
    if not m:
        return None
    raw, suffix = m.group(1), (m.group(2) or "").upper()
    try:
        if suffix:
            factor = 1000 if suffix == "K" else 1000000
            return int(round(float(raw.replace(",", "")) * factor))
        digits = "".join(ch for ch in raw if ch.isdigit())
        return int(digits) if digits else None
    except ValueError:
        return None


def parse_count_or_zero(value) -> int:
    parsed = parse_count(value)
    return parsed if parsed is not None else 0


def last_year(value: Optional[str]) -> Optional[int]:
    """Return the last 4-digit year mentioned in a date range like '2014 - 2018'."""
    if not value:
        return None
    years = re.findall(r"\b(19\d{2}|20\d{2})\b", value)
    return int(years[-1]) if years else None
