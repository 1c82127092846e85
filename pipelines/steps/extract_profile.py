from __future__ import annotations

from typing import Callable, Optional

from extraction.orchestrator import CancellationToken, ExtractionOrchestrator, build_orchestrator
from pipelines.runner import RunContext
from ports.page_source import PageSourcePort


OrchestratorFactory = Callable[[PageSourcePort], ExtractionOrchestrator]


class ExtractProfile:
    def __init__(
        self,
        orchestrator_factory: Optional[OrchestratorFactory] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> None:
        self.orchestrator_factory = orchestrator_factory or build_orchestrator
        self.cancel_token = cancel_token

    def run(self, ctx: RunContext) -> RunContext:
        if ctx.profile is not None:
            return ctx
        if ctx.source is None:
            raise ValueError("ExtractProfile needs a page source on the run context")
        orchestrator = self.orchestrator_factory(ctx.source)
        ctx.profile = orchestrator.run(self.cancel_token)
        ctx.meta["attempts"] = orchestrator.transitions[-1][1]
        ctx.meta["transitions"] = [(state.value, n) for state, n in orchestrator.transitions]
        return ctx
