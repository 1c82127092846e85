from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from models.target_profile import TargetProfile
from ports.page_source import PageSourcePort
from utils.logging_setup import init_logging


@dataclass
class RunContext:
    source: Optional[PageSourcePort] = None
    profile: Optional[TargetProfile] = None
    cached: bool = False
    meta: dict = field(default_factory=dict)


class Step(Protocol):
    def run(self, ctx: RunContext) -> RunContext:
        ...


class Pipeline:
    def __init__(self, steps: List[Step]):
        self.steps = steps

    def run(self, ctx: RunContext) -> RunContext:
        # Make logging idempotent for any direct runner use
        init_logging()
        for step in self.steps:
            ctx = step.run(ctx)
        return ctx
