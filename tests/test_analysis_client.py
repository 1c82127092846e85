from __future__ import annotations

import dataclasses

import pytest
import requests

from config.settings import get_settings
from errors import AnalysisServiceError
from extraction.assembler import ProfileAssembler
from extraction.page import PageDocument
from fixtures import PROFILE_URL, profile_html
from models import ProfileAnalysis, UserProfile
from services.analysis_client import AnalysisClient


class _Resp:
    def __init__(self, status_code, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class _Session:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.exc:
            raise self.exc
        return self.response


@pytest.fixture()
def settings(monkeypatch):
    monkeypatch.setenv("CALL_TRACE", "false")
    get_settings.cache_clear()
    return dataclasses.replace(get_settings(), analysis_api_url="http://svc.local/api/", analysis_api_token="tok")


def _target():
    return ProfileAssembler().assemble(PageDocument.from_html(PROFILE_URL, profile_html()))


def test_analyze_posts_profile_dto_with_bearer_token(settings):
    session = _Session(_Resp(200, {"data": {"talkingPoints": [{"topic": "Go"}], "suggestedApproach": "Ask"}}))
    client = AnalysisClient(settings, session=session)
    target = _target()

    analysis = client.analyze_profile(target, UserProfile(id="u1"))

    call = session.calls[0]
    assert call["url"] == "http://svc.local/api/analyze"
    assert call["headers"]["Authorization"] == "Bearer tok"
    assert call["json"]["targetProfile"]["linkedinUrl"] == target.linkedin_url
    assert call["json"]["targetProfile"]["rawProfileText"].startswith("=== LINKEDIN PROFILE DATA ===")
    assert isinstance(analysis, ProfileAnalysis)
    assert analysis.target_profile_id == target.id
    assert analysis.user_profile_id == "u1"
    assert analysis.talking_points[0].topic == "Go"


def test_generate_returns_draft(settings):
    session = _Session(_Resp(200, {"subject": "Hi", "body": "Hello Jane"}))
    client = AnalysisClient(settings, session=session)
    target = _target()
    analysis = ProfileAnalysis(target_profile_id=target.id, user_profile_id="u1")

    draft = client.generate_message(target, analysis, UserProfile(id="u1"), {"tone": "casual"})

    assert session.calls[0]["url"] == "http://svc.local/api/generate"
    assert draft.body == "Hello Jane"
    assert draft.target_profile_id == target.id
    assert draft.analysis_id == analysis.cache_key


def test_http_error_is_typed(settings):
    client = AnalysisClient(settings, session=_Session(_Resp(503, text="down")))
    with pytest.raises(AnalysisServiceError) as exc:
        client.analyze_profile(_target(), UserProfile(id="u1"))
    assert exc.value.status_code == 503
    assert exc.value.to_payload()["code"] == "ANALYSIS_FAILED"


def test_transport_error_is_typed(settings):
    client = AnalysisClient(settings, session=_Session(exc=requests.exceptions.ConnectionError("refused")))
    with pytest.raises(AnalysisServiceError):
        client.analyze_profile(_target(), UserProfile(id="u1"))


def test_unconfigured_client_fails_fast(settings):
    client = AnalysisClient(dataclasses.replace(settings, analysis_api_url=None), session=_Session())
    with pytest.raises(AnalysisServiceError):
        client.analyze_profile(_target(), UserProfile(id="u1"))
