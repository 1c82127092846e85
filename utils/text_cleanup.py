from __future__ import annotations

import re
from typing import Iterable, List, Optional


# Button labels and other UI chrome that leaks into section text.
CHROME_PHRASES: List[str] = [
    "…see more",
    "...see more",
    "see more",
    "see less",
    "show all",
    "show more",
    "show less",
    "show credential",
    "endorse",
    "message",
    "connect",
    "follow",
    "following",
    "more",
]

_CHROME_PATTERNS = [
    re.compile(r"^show all \d+ .*$", re.IGNORECASE),
    re.compile(r"^\d+ endorsements?$", re.IGNORECASE),
    re.compile(r"^endorsed by .*$", re.IGNORECASE),
    re.compile(r"^\d+(st|nd|rd|th)?\+? degree connection$", re.IGNORECASE),
]

_WS = re.compile(r"\s+")


def collapse_whitespace(text: Optional[str]) -> str:
    if not text:
        return ""
    return _WS.sub(" ", text).strip()


def is_chrome(text: str) -> bool:
    low = text.strip().lower()
    if low in CHROME_PHRASES:
        return True
    return any(p.match(low) for p in _CHROME_PATTERNS)


def strip_chrome(text: Optional[str]) -> str:
    """Collapse whitespace and drop trailing 'see more'-style labels."""
    cleaned = collapse_whitespace(text)
    low = cleaned.lower()
    for phrase in ("…see more", "...see more", "see more", "see less"):
        if low.endswith(phrase):
            cleaned = cleaned[: -len(phrase)].rstrip()
            low = cleaned.lower()
    return cleaned


def clean_text(text: Optional[str]) -> Optional[str]:
    """Normalize a node's text; None when nothing meaningful remains."""
    cleaned = strip_chrome(text)
    if not cleaned or is_chrome(cleaned):
        return None
    return cleaned


def dedupe(items: Iterable[str]) -> List[str]:
    """Exact-match de-duplication preserving first-seen order."""
    seen = set()
    out: List[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        out.append(item)
    return out


def truncate(text: str, limit: int, ellipsis: str = "...") -> str:
    if len(text) <= limit:
        return text
    return text[: limit - len(ellipsis)] + ellipsis
