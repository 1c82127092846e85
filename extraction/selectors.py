"""
Priority-fallback selector resolution.

Every logical field carries several CSS patterns spanning known page layouts.
Patterns are tried strictly in order; the first one that parses and matches
wins. Malformed patterns are recorded and skipped, never raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

from bs4 import Tag
from soupsieve import SelectorSyntaxError

logger = logging.getLogger(__name__)


NodePredicate = Callable[[Tag], bool]


class PatternOutcome(str, Enum):
    MATCHED = "matched"
    PATTERN_INVALID = "pattern_invalid"
    NO_MATCH = "no_match"


@dataclass(frozen=True)
class PatternAttempt:
    pattern: str
    outcome: PatternOutcome
    nodes: List[Tag] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def node(self) -> Optional[Tag]:
        return self.nodes[0] if self.nodes else None


@dataclass
class Resolution:
    attempts: List[PatternAttempt] = field(default_factory=list)

    @property
    def winner(self) -> Optional[PatternAttempt]:
        for attempt in self.attempts:
            if attempt.outcome == PatternOutcome.MATCHED:
                return attempt
        return None

    @property
    def node(self) -> Optional[Tag]:
        win = self.winner
        return win.node if win else None

    @property
    def nodes(self) -> List[Tag]:
        win = self.winner
        return list(win.nodes) if win else []

    @property
    def matched_pattern(self) -> Optional[str]:
        win = self.winner
        return win.pattern if win else None


def try_pattern(pattern: str, scope: Tag, accept: Optional[NodePredicate] = None) -> PatternAttempt:
    try:
        found = scope.select(pattern)
    except (SelectorSyntaxError, NotImplementedError, ValueError) as e:
        return PatternAttempt(pattern, PatternOutcome.PATTERN_INVALID, error=str(e))
    if accept is not None:
        found = [n for n in found if accept(n)]
    if not found:
        return PatternAttempt(pattern, PatternOutcome.NO_MATCH)
    return PatternAttempt(pattern, PatternOutcome.MATCHED, nodes=found)


def resolve_with_trace(
    patterns: Sequence[str], scope: Optional[Tag], accept: Optional[NodePredicate] = None
) -> Resolution:
    """Try patterns in order and stop at the first match, keeping every attempt."""
    resolution = Resolution()
    if scope is None:
        return resolution
    for pattern in patterns:
        attempt = try_pattern(pattern, scope, accept)
        resolution.attempts.append(attempt)
        if attempt.outcome == PatternOutcome.PATTERN_INVALID:
            logger.debug("Skipping invalid selector %r: %s", pattern, attempt.error)
        if attempt.outcome == PatternOutcome.MATCHED:
            logger.debug("Selector hit %r", pattern)
            break
    return resolution


def resolve(
    patterns: Sequence[str], scope: Optional[Tag], accept: Optional[NodePredicate] = None
) -> Optional[Tag]:
    return resolve_with_trace(patterns, scope, accept).node


def resolve_all(
    patterns: Sequence[str], scope: Optional[Tag], accept: Optional[NodePredicate] = None
) -> List[Tag]:
    """All nodes matched by the first matching pattern."""
    return resolve_with_trace(patterns, scope, accept).nodes
