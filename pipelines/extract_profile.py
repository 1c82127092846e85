from __future__ import annotations

from typing import Optional

from extraction.orchestrator import CancellationToken
from pipelines.runner import Pipeline, RunContext
from pipelines.steps import CacheProfile, ExtractProfile, LoadCachedProfile
from pipelines.steps.extract_profile import OrchestratorFactory
from ports.page_source import PageSourcePort
from storage.service import StorageService


def extract_and_cache(
    source: PageSourcePort,
    storage: StorageService,
    *,
    use_cache: bool = True,
    orchestrator_factory: Optional[OrchestratorFactory] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> RunContext:
    """Cache-first extraction of one page; fresh results are written back to storage."""
    steps = []
    if use_cache:
        steps.append(LoadCachedProfile(storage))
    steps.append(ExtractProfile(orchestrator_factory, cancel_token))
    steps.append(CacheProfile(storage))
    return Pipeline(steps).run(RunContext(source=source))
