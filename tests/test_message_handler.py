from __future__ import annotations

import dataclasses

import pytest

from config.settings import get_settings

from db.memory_store import InMemoryBackingStore
from extraction.assembler import ProfileAssembler
from extraction.orchestrator import ExtractionOrchestrator
from extraction.page import StaticPageSource
from fixtures import CANONICAL_URL, PROFILE_URL, FakeClock, profile_html
from models import MessageDraft, ProfileAnalysis
from storage.cache import NamespacedStore
from storage.namespaces import QuotaDomain
from storage.service import StorageService
from services.analysis_client import AnalysisClient
from services.message_handler import MessageHandler, build_message_handler
from storage.sweeper import CacheSweeper


class FakeAnalysis:
    def __init__(self):
        self.analyze_calls = 0
        self.generate_calls = 0

    def analyze_profile(self, target, user):
        self.analyze_calls += 1
        return ProfileAnalysis(target_profile_id=target.id, user_profile_id=user.id, suggested_approach="Mention the talk")

    def generate_message(self, target, analysis, user, options=None):
        self.generate_calls += 1
        return MessageDraft(target_profile_id=target.id, analysis_id=analysis.cache_key, body=f"Hi {target.name}")


def _fast_orchestrator(source):
    return ExtractionOrchestrator(ProfileAssembler(), source, delay=lambda _s: None)


@pytest.fixture()
def storage():
    return StorageService(NamespacedStore(InMemoryBackingStore(), clock=FakeClock()))


@pytest.fixture()
def handler(storage):
    return MessageHandler(storage, analysis=FakeAnalysis(), orchestrator_factory=_fast_orchestrator)


def _extract(handler, **payload):
    body = {"url": PROFILE_URL, "html": profile_html()}
    body.update(payload)
    return handler.handle({"type": "EXTRACT_PROFILE", "payload": body})


def test_ping(handler):
    assert handler.handle({"type": "PING"}) == {"success": True, "data": "pong"}


def test_extract_profile_returns_classified_profile(handler, storage):
    resp = _extract(handler)
    assert resp["success"] is True
    assert resp["quality"] == "complete"
    assert resp["missingFields"] == []
    assert resp["cached"] is False
    assert resp["data"]["name"] == "Jane Doe"
    assert resp["data"]["linkedinUrl"] == CANONICAL_URL
    assert storage.get_target_profile(resp["data"]["id"]) is not None


def test_extract_profile_is_cache_first(handler):
    _extract(handler)
    again = _extract(handler, html="<html></html>")
    assert again["success"] is True
    assert again["cached"] is True

    fresh = _extract(handler, useCache=False, html=profile_html(headline="Building useful things"))
    assert fresh["cached"] is False
    assert fresh["quality"] == "minimal"


def test_extract_uses_host_page_source(storage):
    source = StaticPageSource(PROFILE_URL, html=profile_html())
    handler = MessageHandler(storage, page_source=source, orchestrator_factory=_fast_orchestrator)
    resp = handler.handle({"type": "EXTRACT_PROFILE"})
    assert resp["success"] is True
    assert resp["data"]["currentCompany"] == "Acme Corp"


def test_extract_without_page_is_invalid_request(storage):
    resp = MessageHandler(storage).handle({"type": "EXTRACT_PROFILE"})
    assert resp["success"] is False
    assert resp["error"]["code"] == "INVALID_REQUEST"


def test_wrong_page_surfaces_invalid_page(handler):
    resp = _extract(handler, url="https://www.linkedin.com/feed/")
    assert resp == {
        "success": False,
        "error": {
            "code": "INVALID_PAGE",
            "message": "Not a LinkedIn profile page: https://www.linkedin.com/feed/",
            "url": "https://www.linkedin.com/feed/",
        },
    }


def test_exhausted_retries_surface_extraction_failed(handler):
    resp = _extract(handler, html=profile_html(name=None))
    assert resp["success"] is False
    assert resp["error"]["code"] == "EXTRACTION_FAILED"
    assert resp["error"]["attempts"] == 3
    assert resp["error"]["missingFields"] == ["name"]


def test_quota_overflow_surfaces_to_caller():
    store = NamespacedStore(InMemoryBackingStore(), clock=FakeClock(), capacities={QuotaDomain.LOCAL: 200})
    handler = MessageHandler(StorageService(store), orchestrator_factory=_fast_orchestrator)
    resp = _extract(handler)
    assert resp["success"] is False
    assert resp["error"]["code"] == "STORAGE_QUOTA_EXCEEDED"
    assert resp["error"]["capacity"] == 200


def test_unknown_type_and_bad_payload(handler):
    assert handler.handle({"type": "NOPE"})["error"]["code"] == "INVALID_REQUEST"
    assert handler.handle({"type": "PING", "payload": [1]})["error"]["code"] == "INVALID_REQUEST"
    assert handler.handle({"type": "CHECK_OUTREACH", "payload": {}})["error"]["code"] == "INVALID_REQUEST"


def test_analyze_requires_user_profile_then_is_cache_first(handler):
    profile_id = _extract(handler)["data"]["id"]

    resp = handler.handle({"type": "ANALYZE_PROFILE", "payload": {"targetProfileId": profile_id}})
    assert resp["error"]["code"] == "INVALID_REQUEST"

    handler.handle({"type": "SAVE_USER_PROFILE", "payload": {"profile": {"id": "u1", "name": "Sam"}}})
    first = handler.handle({"type": "ANALYZE_PROFILE", "payload": {"targetProfileId": profile_id}})
    second = handler.handle({"type": "ANALYZE_PROFILE", "payload": {"targetProfileId": profile_id}})

    assert first["success"] and second["success"]
    assert handler.analysis.analyze_calls == 1
    cached = handler.handle({"type": "GET_CACHED_ANALYSIS", "payload": {"targetProfileId": profile_id}})
    assert cached["data"]["suggestedApproach"] == "Mention the talk"


def test_generate_and_edit_draft(handler):
    profile_id = _extract(handler)["data"]["id"]
    handler.handle({"type": "SAVE_USER_PROFILE", "payload": {"profile": {"id": "u1"}}})

    resp = handler.handle({"type": "GENERATE_MESSAGE", "payload": {"targetProfileId": profile_id}})
    assert resp["data"]["body"] == "Hi Jane Doe"

    edit = handler.handle(
        {"type": "SAVE_EDIT", "payload": {"targetProfileId": profile_id, "oldText": "Hi", "newText": "Hello"}}
    )
    assert edit["data"]["body"] == "Hello Jane Doe"
    draft = handler.handle({"type": "GET_DRAFT", "payload": {"targetProfileId": profile_id}})
    assert len(draft["data"]["manualEdits"]) == 1


def test_analysis_without_service_is_typed_error(storage):
    handler = MessageHandler(storage, orchestrator_factory=_fast_orchestrator)
    profile_id = _extract(handler)["data"]["id"]
    handler.handle({"type": "SAVE_USER_PROFILE", "payload": {"profile": {"id": "u1"}}})
    resp = handler.handle({"type": "ANALYZE_PROFILE", "payload": {"targetProfileId": profile_id}})
    assert resp["error"]["code"] == "ANALYSIS_FAILED"


def test_outreach_round_trip(handler):
    handler.handle({"type": "RECORD_OUTREACH", "payload": {"name": "Jane Doe", "url": PROFILE_URL}})
    check = handler.handle({"type": "CHECK_OUTREACH", "payload": {"url": CANONICAL_URL}})
    assert check["data"]["contacted"] is True
    history = handler.handle({"type": "GET_OUTREACH_HISTORY"})
    assert [e["targetName"] for e in history["data"]] == ["Jane Doe"]


def test_settings_and_subscription(handler):
    assert handler.handle({"type": "GET_SETTINGS"})["data"]["theme"] == "auto"
    assert handler.handle({"type": "SAVE_SETTINGS", "payload": {"theme": "dark"}})["data"]["theme"] == "dark"
    assert handler.handle({"type": "GET_SUBSCRIPTION"})["data"]["plan"] == "free"
    saved = handler.handle({"type": "SAVE_SUBSCRIPTION", "payload": {"plan": {"userId": "u1", "plan": "paid"}}})
    assert saved["data"]["plan"] == "paid"


def test_usage_sweep_forget_and_clear(handler):
    _extract(handler)
    usage = handler.handle({"type": "STORAGE_GET_USAGE"})["data"]
    assert usage["local"]["used"] > 0
    assert handler.handle({"type": "STORAGE_SWEEP"})["data"]["targetProfiles"] == 0

    forgot = handler.handle({"type": "FORGET_PROFILE", "payload": {"url": PROFILE_URL}})
    assert forgot["data"]["removed"] == 1

    refused = handler.handle({"type": "STORAGE_CLEAR_ALL", "payload": {"confirmation": "please"}})
    assert refused["error"]["code"] == "INVALID_REQUEST"
    cleared = handler.handle({"type": "STORAGE_CLEAR_ALL", "payload": {"confirmation": "CONFIRM_DELETE_ALL"}})
    assert cleared["success"] is True


def test_invalid_record_payload_is_rejected(handler):
    resp = handler.handle({"type": "SAVE_DRAFT", "payload": {"draft": {"body": "no target"}}})
    assert resp["success"] is False
    assert resp["error"]["code"] == "INVALID_REQUEST"


def test_all_message_types_are_routed(handler):
    assert handler.message_types == sorted(
        [
            "EXTRACT_PROFILE", "GET_CACHED_PROFILE", "ANALYZE_PROFILE", "GET_CACHED_ANALYSIS",
            "SAVE_ANALYSIS", "GENERATE_MESSAGE", "GET_DRAFT", "SAVE_DRAFT", "SAVE_EDIT",
            "RECORD_OUTREACH", "CHECK_OUTREACH", "GET_OUTREACH_HISTORY", "GET_USER_PROFILE",
            "SAVE_USER_PROFILE", "GET_SETTINGS", "SAVE_SETTINGS", "GET_SUBSCRIPTION",
            "SAVE_SUBSCRIPTION", "STORAGE_GET_USAGE", "STORAGE_SWEEP", "STORAGE_CLEAR_ALL",
            "FORGET_PROFILE", "PING",
        ]
    )


def test_handler_owns_the_background_sweeper(storage):
    sweeper = CacheSweeper(storage.store, interval_seconds=60)
    handler = MessageHandler(storage, sweeper=sweeper)
    handler.start()
    try:
        assert sweeper.running
        assert handler.handle({"type": "PING"})["success"] is True
    finally:
        handler.stop()
    assert not sweeper.running


def test_build_message_handler_wires_settings(storage):
    settings = dataclasses.replace(
        get_settings(), sweep_interval_seconds=120.0, analysis_api_url="http://analysis.local"
    )
    handler = build_message_handler(storage, settings)
    assert handler.sweeper.interval_seconds == 120.0
    assert handler.sweeper.store is storage.store
    assert isinstance(handler.analysis, AnalysisClient)

    offline = build_message_handler(storage, dataclasses.replace(settings, analysis_api_url=None))
    assert offline.analysis is None
