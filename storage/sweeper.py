from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from config.settings import Settings, get_settings
from storage.cache import NamespacedStore

logger = logging.getLogger(__name__)


class CacheSweeper:
    """Background timer that removes expired records from every namespace.

    Runs on its own daemon thread and never blocks extraction calls; a failed
    sweep is logged and the next one runs on schedule.
    """

    def __init__(self, store: NamespacedStore, interval_seconds: float = 86400.0):
        self.store = store
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def run_once(self) -> Dict[str, int]:
        counts = self.store.sweep_all()
        logger.info(
            "Cache sweep removed %d record(s)",
            sum(counts.values()),
            extra={"step": "sweep", "status": "ok"},
        )
        return counts

    def _loop(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            try:
                self.run_once()
            except Exception as e:
                logger.exception("Cache sweep failed: %s", e, extra={"step": "sweep", "status": "error"})

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="cache-sweeper", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()


def build_sweeper(store: NamespacedStore, settings: Optional[Settings] = None) -> CacheSweeper:
    """Sweeper on the interval from runtime settings (SWEEP_INTERVAL_SECONDS)."""
    settings = settings or get_settings()
    return CacheSweeper(store, interval_seconds=settings.sweep_interval_seconds)
