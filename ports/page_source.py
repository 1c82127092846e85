from __future__ import annotations

from typing import Protocol

from extraction.page import PageDocument


class PageSourcePort(Protocol):
    """Live host page: each snapshot re-reads whatever is currently rendered."""

    url: str

    def snapshot(self) -> PageDocument:
        ...

    def scroll_to(self, position: str) -> None:
        """position is 'top', 'middle' or 'bottom'."""
        ...
