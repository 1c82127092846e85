"""
Retry state machine around the profile assembler.

The host page renders asynchronously, so a first pass can miss sections
that appear a moment later. Each attempt re-reads the page from scratch;
between attempts the orchestrator waits, then scrolls the page to nudge
lazy sections into the tree.

    START -> DONE                     assembler returned a profile
    START -> BACKOFF -> START         mandatory field missing, attempts left
    START -> FAILED                   attempts exhausted
"""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Callable, List, Optional, Tuple

from config.settings import Settings, get_settings
from errors import (
    ColderError,
    ExtractionCancelledError,
    ExtractionFailedError,
    InvalidPageError,
    MissingMandatoryFieldError,
)
from extraction.assembler import ProfileAssembler
from extraction.quality import ExtractionQuality
from models.target_profile import TargetProfile
from ports.page_source import PageSourcePort

logger = logging.getLogger(__name__)


ScrollFn = Callable[[str], None]
DelayFn = Callable[[float], None]


class AttemptState(str, Enum):
    START = "start"
    BACKOFF = "backoff"
    DONE = "done"
    FAILED = "failed"


class CancellationToken:
    """Lets the owner of an extraction abort its retry loop (e.g. the tab closed)."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; returns True if cancelled meanwhile."""
        return self._event.wait(max(0.0, seconds))


class ExtractionOrchestrator:
    def __init__(
        self,
        assembler: ProfileAssembler,
        page_source: PageSourcePort,
        *,
        max_attempts: int = 3,
        backoff_base_seconds: float = 2.0,
        nudge_pause_seconds: float = 1.0,
        scroll: Optional[ScrollFn] = None,
        delay: Optional[DelayFn] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.assembler = assembler
        self.page_source = page_source
        self.max_attempts = max_attempts
        self.backoff_base_seconds = backoff_base_seconds
        self.nudge_pause_seconds = nudge_pause_seconds
        self._scroll = scroll or page_source.scroll_to
        self._delay = delay
        self.transitions: List[Tuple[AttemptState, int]] = []

    def _enter(self, state: AttemptState, attempt: int) -> None:
        self.transitions.append((state, attempt))
        logger.debug(
            "Extraction state %s",
            state.value,
            extra={"step": "extract", "status": state.value, "attempt": attempt},
        )

    def _sleep(self, seconds: float, token: CancellationToken) -> None:
        if self._delay is not None:
            self._delay(seconds)
            return
        token.wait(seconds)

    def _backoff(self, next_attempt: int, token: CancellationToken) -> None:
        self._sleep(self.backoff_base_seconds * next_attempt, token)
        if token.cancelled:
            return
        self._scroll("middle")
        self._sleep(self.nudge_pause_seconds, token)
        self._scroll("top")

    def run(self, cancel_token: Optional[CancellationToken] = None) -> TargetProfile:
        token = cancel_token or CancellationToken()
        self.transitions = []
        last_error: Optional[MissingMandatoryFieldError] = None

        for attempt in range(1, self.max_attempts + 1):
            if attempt > 1:
                self._enter(AttemptState.BACKOFF, attempt)
                self._backoff(attempt, token)
            if token.cancelled:
                self._enter(AttemptState.FAILED, attempt)
                raise ExtractionCancelledError(attempt)

            self._enter(AttemptState.START, attempt)
            started = time.monotonic()
            try:
                profile = self.assembler.assemble(self.page_source.snapshot())
            except InvalidPageError:
                self._enter(AttemptState.FAILED, attempt)
                raise
            except MissingMandatoryFieldError as e:
                last_error = e
                logger.warning(
                    "Extraction attempt %d/%d failed: %s",
                    attempt,
                    self.max_attempts,
                    e,
                    extra={"step": "extract", "status": "retry", "attempt": attempt, "error": e.code},
                )
                continue
            except ColderError:
                self._enter(AttemptState.FAILED, attempt)
                raise

            self._enter(AttemptState.DONE, attempt)
            logger.info(
                "Extraction succeeded on attempt %d",
                attempt,
                extra={
                    "step": "extract",
                    "status": "ok",
                    "attempt": attempt,
                    "duration_ms": int((time.monotonic() - started) * 1000),
                },
            )
            return profile

        self._enter(AttemptState.FAILED, self.max_attempts)
        raise ExtractionFailedError(
            attempts=self.max_attempts,
            missing_fields=last_error.missing_fields if last_error else [],
            quality=last_error.quality if last_error else ExtractionQuality.MINIMAL.value,
            last_error=last_error,
        )


def build_orchestrator(
    page_source: PageSourcePort, settings: Optional[Settings] = None, **overrides
) -> ExtractionOrchestrator:
    """Orchestrator wired from runtime settings; keyword overrides win."""
    settings = settings or get_settings()
    options = dict(
        max_attempts=settings.extract_max_attempts,
        backoff_base_seconds=settings.extract_backoff_seconds,
        nudge_pause_seconds=settings.extract_nudge_pause_seconds,
    )
    options.update(overrides)
    return ExtractionOrchestrator(ProfileAssembler(settings.profile_url_markers), page_source, **options)
