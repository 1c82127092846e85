"""
HTTP client for the downstream analysis/generation backend.

The backend owns prompts and model calls; this client only ships the
profile DTO and validates what comes back.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError

from config.settings import Settings, get_settings
from errors import AnalysisServiceError
from models.account import UserProfile
from models.analysis import ProfileAnalysis
from models.message_draft import MessageDraft
from models.target_profile import TargetProfile
from utils.call_logger import log_call

logger = logging.getLogger(__name__)


def target_profile_dto(profile: TargetProfile) -> Dict[str, Any]:
    return {
        "id": profile.id,
        "linkedinUrl": profile.linkedin_url,
        "name": profile.name,
        "currentJobTitle": profile.current_job_title,
        "currentCompany": profile.current_company,
        "rawProfileText": profile.raw_profile_text,
    }


class AnalysisClient:
    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or get_settings()
        self.base_url = (self.settings.analysis_api_url or "").rstrip("/")
        self.session = session or requests.Session()

    def _post(self, operation: str, body: Dict[str, Any]) -> Dict[str, Any]:
        if not self.base_url:
            raise AnalysisServiceError("ANALYSIS_API_URL is not configured")
        headers = {"Content-Type": "application/json"}
        if self.settings.analysis_api_token:
            headers["Authorization"] = f"Bearer {self.settings.analysis_api_token}"

        t0 = time.time()
        try:
            resp = self.session.post(
                f"{self.base_url}/{operation}",
                json=body,
                headers=headers,
                timeout=self.settings.request_timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            dt = int((time.time() - t0) * 1000)
            log_call(caller="analysis_client", service="analysis", operation=operation, duration_ms=dt, status="error", error=str(e))
            raise AnalysisServiceError(f"Analysis service unreachable: {e}") from e

        dt = int((time.time() - t0) * 1000)
        if resp.status_code != 200:
            log_call(
                caller="analysis_client",
                service="analysis",
                operation=operation,
                duration_ms=dt,
                status="error",
                error=f"HTTP {resp.status_code}",
            )
            logger.error("Analysis service %s failed with status %s: %s", operation, resp.status_code, resp.text)
            raise AnalysisServiceError(
                f"Analysis service returned HTTP {resp.status_code}", status_code=resp.status_code
            )
        log_call(caller="analysis_client", service="analysis", operation=operation, duration_ms=dt, status="ok")
        try:
            payload = resp.json()
        except ValueError as e:
            raise AnalysisServiceError("Analysis service returned invalid JSON") from e
        if not isinstance(payload, dict):
            raise AnalysisServiceError("Analysis service returned an unexpected payload")
        return payload

    def analyze_profile(self, target: TargetProfile, user: UserProfile) -> ProfileAnalysis:
        data = self._post(
            "analyze",
            {"targetProfile": target_profile_dto(target), "userProfile": user.to_wire()},
        )
        data = data.get("data", data)
        data.setdefault("targetProfileId", target.id)
        data.setdefault("userProfileId", user.id)
        try:
            return ProfileAnalysis.model_validate(data)
        except ValidationError as e:
            raise AnalysisServiceError(f"Malformed analysis response: {e}") from e

    def generate_message(
        self,
        target: TargetProfile,
        analysis: ProfileAnalysis,
        user: UserProfile,
        options: Optional[Dict[str, Any]] = None,
    ) -> MessageDraft:
        data = self._post(
            "generate",
            {
                "targetProfile": target_profile_dto(target),
                "analysis": analysis.to_wire(),
                "userProfile": user.to_wire(),
                "options": options or {},
            },
        )
        data = data.get("data", data)
        data.setdefault("targetProfileId", target.id)
        data.setdefault("analysisId", analysis.cache_key)
        try:
            return MessageDraft.model_validate(data)
        except ValidationError as e:
            raise AnalysisServiceError(f"Malformed draft response: {e}") from e
