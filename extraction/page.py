from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse, urlunparse

from bs4 import BeautifulSoup


@dataclass
class PageDocument:
    """Snapshot of the host page: its location plus a parsed DOM tree."""

    url: str
    soup: BeautifulSoup

    @classmethod
    def from_html(cls, url: str, html: str) -> "PageDocument":
        return cls(url=url, soup=BeautifulSoup(html or "", "html.parser"))


def is_profile_url(url: Optional[str], markers: Optional[List[str]] = None) -> bool:
    """True when the URL belongs to the profile page family (linkedin.com/in/...)."""
    if not url:
        return False
    try:
        u = urlparse(url)
    except ValueError:
        return False
    host = (u.hostname or "").lower()
    if not (host == "linkedin.com" or host.endswith(".linkedin.com")):
        return False
    if not (u.path or "").startswith("/in/"):
        return False
    if markers:
        target = f"{host}{u.path}"
        return any(m in target for m in markers)
    return True


def canonical_profile_url(url: str) -> str:
    """Drop query string, fragment and trailing slash; this is the identity basis."""
    u = urlparse(url.strip())
    clean = urlunparse((u.scheme.lower(), u.netloc.lower(), u.path, "", "", ""))
    return clean.rstrip("/")


def profile_id_for_url(url: str) -> str:
    canonical = canonical_profile_url(url)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


class StaticPageSource:
    """Page source over saved HTML.

    With ``path`` every snapshot re-reads the file, so a page that is still
    being written (or swapped between attempts) is picked up on retry.
    """

    def __init__(self, url: str, html: Optional[str] = None, path: Optional[str] = None):
        if html is None and path is None:
            raise ValueError("StaticPageSource needs html or path")
        self.url = url
        self.html = html
        self.path = path
        self.scrolls: List[str] = []

    def snapshot(self) -> PageDocument:
        html = Path(self.path).read_text(encoding="utf-8") if self.path else self.html
        return PageDocument.from_html(self.url, html or "")

    def scroll_to(self, position: str) -> None:
        self.scrolls.append(position)
