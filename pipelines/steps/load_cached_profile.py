from __future__ import annotations

import logging

from pipelines.runner import RunContext
from storage.service import StorageService

logger = logging.getLogger(__name__)


class LoadCachedProfile:
    """Short-circuits extraction when a live cached profile exists for the page URL."""

    def __init__(self, storage: StorageService) -> None:
        self.storage = storage

    def run(self, ctx: RunContext) -> RunContext:
        if ctx.profile is not None or ctx.source is None:
            return ctx
        cached = self.storage.get_target_profile_by_url(ctx.source.url)
        if cached is not None:
            logger.info("Using cached profile %s", cached.id, extra={"step": "load_cached", "status": "hit"})
            ctx.profile = cached
            ctx.cached = True
        return ctx
