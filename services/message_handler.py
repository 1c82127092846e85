"""
Request/response boundary used by UI and page contexts.

Every request is ``{"type": ..., "payload": {...}}``; every response is
``{"success": True, "data": ...}`` or ``{"success": False, "error": {"code", "message"}}``.
The handler owns no state of its own; storage, page source and the
analysis service are injected by whatever hosts it.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from config.settings import Settings, get_settings
from errors import AnalysisServiceError, ColderError, InvalidRequestError
from extraction.page import StaticPageSource, profile_id_for_url
from models.account import SubscriptionPlan, UserProfile
from models.analysis import ProfileAnalysis
from models.message_draft import MessageDraft, apply_manual_edit
from models.target_profile import TargetProfile
from pipelines.extract_profile import extract_and_cache
from pipelines.steps.extract_profile import OrchestratorFactory
from ports.analysis import AnalysisServicePort
from ports.page_source import PageSourcePort
from services.analysis_client import AnalysisClient
from storage.service import StorageService
from storage.sweeper import CacheSweeper, build_sweeper

logger = logging.getLogger(__name__)


Response = Dict[str, Any]
Payload = Dict[str, Any]


def _require(payload: Payload, key: str) -> Any:
    value = payload.get(key)
    if value is None or value == "":
        raise InvalidRequestError(f"Missing required field '{key}'")
    return value


def _ok(data: Any = None, **extra: Any) -> Response:
    return {"success": True, "data": data, **extra}


class MessageHandler:
    def __init__(
        self,
        storage: StorageService,
        *,
        page_source: Optional[PageSourcePort] = None,
        analysis: Optional[AnalysisServicePort] = None,
        orchestrator_factory: Optional[OrchestratorFactory] = None,
        sweeper: Optional[CacheSweeper] = None,
    ):
        self.storage = storage
        self.sweeper = sweeper
        self.page_source = page_source
        self.analysis = analysis
        self.orchestrator_factory = orchestrator_factory
        self._routes: Dict[str, Callable[[Payload], Response]] = {
            "PING": lambda _p: _ok("pong"),
            "EXTRACT_PROFILE": self._extract_profile,
            "GET_CACHED_PROFILE": self._get_cached_profile,
            "ANALYZE_PROFILE": self._analyze_profile,
            "GET_CACHED_ANALYSIS": self._get_cached_analysis,
            "SAVE_ANALYSIS": self._save_analysis,
            "GENERATE_MESSAGE": self._generate_message,
            "GET_DRAFT": self._get_draft,
            "SAVE_DRAFT": self._save_draft,
            "SAVE_EDIT": self._save_edit,
            "RECORD_OUTREACH": self._record_outreach,
            "CHECK_OUTREACH": self._check_outreach,
            "GET_OUTREACH_HISTORY": self._get_outreach_history,
            "GET_USER_PROFILE": self._get_user_profile,
            "SAVE_USER_PROFILE": self._save_user_profile,
            "GET_SETTINGS": lambda _p: _ok(self.storage.get_settings().to_wire()),
            "SAVE_SETTINGS": lambda p: _ok(self.storage.save_settings(p).to_wire()),
            "GET_SUBSCRIPTION": lambda _p: _ok(self.storage.get_subscription_plan().to_wire()),
            "SAVE_SUBSCRIPTION": self._save_subscription,
            "STORAGE_GET_USAGE": lambda _p: _ok(self.storage.get_storage_usage()),
            "STORAGE_SWEEP": lambda _p: _ok(self.storage.sweep()),
            "STORAGE_CLEAR_ALL": lambda p: _ok({"removed": self.storage.clear_all_data(p.get("confirmation", ""))}),
            "FORGET_PROFILE": self._forget_profile,
        }

    @property
    def message_types(self):
        return sorted(self._routes)

    def start(self) -> None:
        """Start background work owned by the handler (the periodic cache sweep)."""
        if self.sweeper is not None:
            self.sweeper.start()
            logger.info(
                "Cache sweeper started (every %ss)", self.sweeper.interval_seconds, extra={"step": "sweep"}
            )

    def stop(self) -> None:
        if self.sweeper is not None:
            self.sweeper.stop()

    def handle(self, message: Dict[str, Any]) -> Response:
        msg_type = message.get("type") if isinstance(message, dict) else None
        try:
            route = self._routes.get(msg_type or "")
            if route is None:
                raise InvalidRequestError(f"Unknown message type: {msg_type}")
            payload = message.get("payload") or {}
            if not isinstance(payload, dict):
                raise InvalidRequestError("Payload must be an object")
            return route(payload)
        except ColderError as e:
            logger.warning("%s failed: %s", msg_type, e, extra={"step": msg_type, "status": "error", "error": e.code})
            return {"success": False, "error": e.to_payload()}
        except ValidationError as e:
            logger.warning("%s rejected: %s", msg_type, e, extra={"step": msg_type, "status": "error"})
            return {"success": False, "error": {"code": InvalidRequestError.code, "message": str(e)}}
        except Exception as e:
            logger.exception("Unhandled error in %s", msg_type, extra={"step": msg_type, "status": "error"})
            return {"success": False, "error": {"code": "INTERNAL_ERROR", "message": str(e)}}

    # --- extraction -----------------------------------------------------------

    def _extract_profile(self, payload: Payload) -> Response:
        if payload.get("html") is not None:
            source: PageSourcePort = StaticPageSource(_require(payload, "url"), html=payload["html"])
        elif self.page_source is not None:
            source = self.page_source
        else:
            raise InvalidRequestError("No page available to extract from")

        ctx = extract_and_cache(
            source,
            self.storage,
            use_cache=payload.get("useCache", True),
            orchestrator_factory=self.orchestrator_factory,
        )
        profile = ctx.profile
        return _ok(
            profile.to_wire(),
            quality=profile.extraction_quality.value,
            missingFields=profile.missing_fields,
            cached=ctx.cached,
        )

    def _profile_from(self, payload: Payload) -> Optional[TargetProfile]:
        if payload.get("profileId") or payload.get("targetProfileId"):
            return self.storage.get_target_profile(payload.get("profileId") or payload["targetProfileId"])
        return self.storage.get_target_profile_by_url(_require(payload, "url"))

    def _get_cached_profile(self, payload: Payload) -> Response:
        profile = self._profile_from(payload)
        return _ok(profile.to_wire() if profile else None)

    # --- analysis / generation ------------------------------------------------

    def _require_context(self, payload: Payload):
        target = self._profile_from(payload)
        if target is None:
            raise InvalidRequestError("Profile not extracted yet; extract it first")
        user = self.storage.get_user_profile()
        if user is None:
            raise InvalidRequestError("Set up your own profile before analyzing")
        return target, user

    def _analysis_service(self) -> AnalysisServicePort:
        if self.analysis is None:
            raise AnalysisServiceError("Analysis service is not configured")
        return self.analysis

    def _analyze(self, target: TargetProfile, user: UserProfile, refresh: bool = False) -> ProfileAnalysis:
        if not refresh:
            cached = self.storage.get_analysis(target.id, user.id)
            if cached is not None:
                return cached
        analysis = self._analysis_service().analyze_profile(target, user)
        self.storage.save_analysis(analysis)
        return analysis

    def _analyze_profile(self, payload: Payload) -> Response:
        target, user = self._require_context(payload)
        return _ok(self._analyze(target, user, refresh=bool(payload.get("refresh"))).to_wire())

    def _get_cached_analysis(self, payload: Payload) -> Response:
        target_id = _require(payload, "targetProfileId")
        user_id = payload.get("userProfileId")
        if not user_id:
            user = self.storage.get_user_profile()
            if user is None:
                return _ok(None)
            user_id = user.id
        analysis = self.storage.get_analysis(target_id, user_id)
        return _ok(analysis.to_wire() if analysis else None)

    def _save_analysis(self, payload: Payload) -> Response:
        analysis = ProfileAnalysis.model_validate(_require(payload, "analysis"))
        self.storage.save_analysis(analysis)
        return _ok(analysis.to_wire())

    def _generate_message(self, payload: Payload) -> Response:
        target, user = self._require_context(payload)
        analysis = self._analyze(target, user)
        draft = self._analysis_service().generate_message(target, analysis, user, payload.get("options"))
        self.storage.save_message_draft(draft)
        return _ok(draft.to_wire())

    # --- drafts ---------------------------------------------------------------

    def _get_draft(self, payload: Payload) -> Response:
        draft = self.storage.get_message_draft(_require(payload, "targetProfileId"))
        return _ok(draft.to_wire() if draft else None)

    def _save_draft(self, payload: Payload) -> Response:
        draft = MessageDraft.model_validate(_require(payload, "draft"))
        self.storage.save_message_draft(draft)
        return _ok(draft.to_wire())

    def _save_edit(self, payload: Payload) -> Response:
        target_id = _require(payload, "targetProfileId")
        draft = self.storage.get_message_draft(target_id)
        if draft is None:
            raise InvalidRequestError(f"No draft for profile {target_id}")
        edited = apply_manual_edit(draft, _require(payload, "oldText"), payload.get("newText", ""))
        self.storage.save_message_draft(edited)
        return _ok(edited.to_wire())

    # --- outreach -------------------------------------------------------------

    def _record_outreach(self, payload: Payload) -> Response:
        entry = self.storage.record_outreach(_require(payload, "name"), _require(payload, "url"))
        return _ok(entry.to_wire())

    def _check_outreach(self, payload: Payload) -> Response:
        entry = self.storage.find_outreach_by_url(_require(payload, "url"))
        return _ok({"contacted": entry is not None, "entry": entry.to_wire() if entry else None})

    def _get_outreach_history(self, payload: Payload) -> Response:
        return _ok([e.to_wire() for e in self.storage.get_outreach_history()])

    # --- singletons -----------------------------------------------------------

    def _get_user_profile(self, payload: Payload) -> Response:
        user = self.storage.get_user_profile()
        return _ok(user.to_wire() if user else None)

    def _save_user_profile(self, payload: Payload) -> Response:
        user = UserProfile.model_validate(_require(payload, "profile"))
        self.storage.save_user_profile(user)
        return _ok(user.to_wire())

    def _save_subscription(self, payload: Payload) -> Response:
        plan = SubscriptionPlan.model_validate(_require(payload, "plan"))
        self.storage.save_subscription_plan(plan)
        return _ok(plan.to_wire())

    # --- maintenance ----------------------------------------------------------

    def _forget_profile(self, payload: Payload) -> Response:
        profile_id = payload.get("profileId") or profile_id_for_url(_require(payload, "url"))
        return _ok({"removed": self.storage.forget_profile(profile_id)})


def build_message_handler(
    storage: StorageService,
    settings: Optional[Settings] = None,
    *,
    page_source: Optional[PageSourcePort] = None,
    analysis: Optional[AnalysisServicePort] = None,
) -> MessageHandler:
    """Handler for a long-lived host: settings-driven sweeper, analysis client when a backend is configured."""
    settings = settings or get_settings()
    if analysis is None and settings.analysis_api_url:
        analysis = AnalysisClient(settings)
    return MessageHandler(
        storage,
        page_source=page_source,
        analysis=analysis,
        sweeper=build_sweeper(storage.store, settings),
    )
