from __future__ import annotations

from pipelines.runner import RunContext
from storage.service import StorageService


class CacheProfile:
    def __init__(self, storage: StorageService) -> None:
        self.storage = storage

    def run(self, ctx: RunContext) -> RunContext:
        if ctx.profile is not None and not ctx.cached:
            self.storage.save_target_profile(ctx.profile)
        return ctx
