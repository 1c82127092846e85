from __future__ import annotations

from typing import List

import pytest

from db.memory_store import InMemoryBackingStore
from errors import ExtractionFailedError
from extraction.assembler import ProfileAssembler
from extraction.orchestrator import ExtractionOrchestrator
from extraction.page import PageDocument, StaticPageSource
from fixtures import CANONICAL_URL, PROFILE_URL, profile_html
from pipelines.extract_profile import extract_and_cache
from pipelines.runner import Pipeline, RunContext
from pipelines.steps import CacheProfile, ExtractProfile, LoadCachedProfile
from storage.cache import NamespacedStore
from storage.service import StorageService


class LateRenderingPage:
    """Serves the next page in the list on each snapshot, repeating the last one."""

    def __init__(self, pages: List[str]):
        self.url = PROFILE_URL
        self.pages = pages
        self.snapshots = 0
        self.scrolls: List[str] = []

    def snapshot(self) -> PageDocument:
        html = self.pages[min(self.snapshots, len(self.pages) - 1)]
        self.snapshots += 1
        return PageDocument.from_html(self.url, html)

    def scroll_to(self, position: str) -> None:
        self.scrolls.append(position)


def _factory(source):
    return ExtractionOrchestrator(ProfileAssembler(), source, delay=lambda _s: None)


@pytest.fixture()
def storage():
    return StorageService(NamespacedStore(InMemoryBackingStore()))


def test_extract_step_records_attempts_and_transitions():
    source = LateRenderingPage([profile_html(name=None), profile_html()])
    ctx = ExtractProfile(_factory).run(RunContext(source=source))

    assert ctx.profile.name == "Jane Doe"
    assert ctx.meta["attempts"] == 2
    assert ctx.meta["transitions"] == [("start", 1), ("backoff", 2), ("start", 2), ("done", 2)]
    assert source.scrolls == ["middle", "top"]


def test_extract_step_needs_a_source():
    with pytest.raises(ValueError):
        ExtractProfile(_factory).run(RunContext())


def test_cache_hit_skips_extraction(storage):
    source = StaticPageSource(PROFILE_URL, html=profile_html())
    first = extract_and_cache(source, storage, orchestrator_factory=_factory)
    assert first.cached is False
    assert storage.get_target_profile_by_url(CANONICAL_URL) is not None

    calls = []

    def counting_factory(src):
        calls.append(src)
        return _factory(src)

    pipeline = Pipeline([LoadCachedProfile(storage), ExtractProfile(counting_factory), CacheProfile(storage)])
    second = pipeline.run(RunContext(source=StaticPageSource(PROFILE_URL, html="<html></html>")))
    assert second.cached is True
    assert second.profile.id == first.profile.id
    assert calls == []


def test_failed_extraction_caches_nothing(storage):
    source = LateRenderingPage([profile_html(name=None)])
    with pytest.raises(ExtractionFailedError):
        extract_and_cache(source, storage, orchestrator_factory=_factory)
    assert storage.get_target_profile_by_url(PROFILE_URL) is None
    assert source.snapshots == 3
