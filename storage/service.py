from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from errors import InvalidRequestError
from extraction.page import canonical_profile_url, profile_id_for_url
from models.account import ExtensionSettings, PlanTier, SubscriptionPlan, UserProfile
from models.analysis import ProfileAnalysis, analysis_key
from models.message_draft import MessageDraft
from models.outreach_history import OutreachHistory
from models.target_profile import TargetProfile
from storage.cache import NamespacedStore
from storage.namespaces import Namespace, QuotaDomain, ttl_for

logger = logging.getLogger(__name__)


CLEAR_ALL_CONFIRMATION = "CONFIRM_DELETE_ALL"
SINGLETON_KEY = "current"
DEFAULT_USER_ID = "local"


class StorageService:
    """Typed read/write surface over the namespaced store, one pair per record kind."""

    def __init__(self, store: NamespacedStore):
        self.store = store

    # --- target profiles ------------------------------------------------------

    def save_target_profile(self, profile: TargetProfile) -> None:
        self.store.put(Namespace.TARGET_PROFILES, profile.id, profile.to_wire())

    def get_target_profile(self, profile_id: str) -> Optional[TargetProfile]:
        data = self.store.get(Namespace.TARGET_PROFILES, profile_id)
        return TargetProfile.model_validate(data) if data is not None else None

    def get_target_profile_by_url(self, url: str) -> Optional[TargetProfile]:
        return self.get_target_profile(profile_id_for_url(url))

    # --- analyses -------------------------------------------------------------

    def save_analysis(self, analysis: ProfileAnalysis) -> None:
        self.store.put(Namespace.PROFILE_ANALYSES, analysis.cache_key, analysis.to_wire())

    def get_analysis(self, target_profile_id: str, user_profile_id: str) -> Optional[ProfileAnalysis]:
        data = self.store.get(Namespace.PROFILE_ANALYSES, analysis_key(target_profile_id, user_profile_id))
        return ProfileAnalysis.model_validate(data) if data is not None else None

    # --- message drafts -------------------------------------------------------

    def save_message_draft(self, draft: MessageDraft) -> None:
        # One live draft per target profile; a newer draft replaces the old one
        self.store.put(Namespace.MESSAGE_DRAFTS, draft.target_profile_id, draft.to_wire())

    def get_message_draft(self, target_profile_id: str) -> Optional[MessageDraft]:
        data = self.store.get(Namespace.MESSAGE_DRAFTS, target_profile_id)
        return MessageDraft.model_validate(data) if data is not None else None

    def list_message_drafts(self) -> List[MessageDraft]:
        drafts = [MessageDraft.model_validate(d) for d in self.store.values(Namespace.MESSAGE_DRAFTS)]
        return sorted(drafts, key=lambda d: d.generated_at, reverse=True)

    def delete_message_draft(self, target_profile_id: str) -> bool:
        return self.store.delete(Namespace.MESSAGE_DRAFTS, target_profile_id)

    # --- outreach history -----------------------------------------------------

    def record_outreach(
        self, target_name: str, target_url: str, plan: Optional[SubscriptionPlan] = None
    ) -> OutreachHistory:
        """Remember a contact; free-tier entries expire after 5 days, paid ones never."""
        plan = plan or self.get_subscription_plan()
        url = canonical_profile_url(target_url)
        now = self.store.clock()
        ttl = ttl_for(self.store.policy(Namespace.OUTREACH_HISTORY), paid=plan.is_paid)
        entry = OutreachHistory(
            target_profile_id=profile_id_for_url(url),
            target_name=target_name,
            target_linkedin_url=url,
            contacted_at=now,
            expires_at=now + ttl if ttl is not None else None,
        )
        self.store.put(
            Namespace.OUTREACH_HISTORY,
            entry.target_profile_id,
            entry.to_wire(),
            created_at=now,
            paid=plan.is_paid,
        )
        logger.info(
            "Recorded outreach to %s (plan=%s)",
            url,
            plan.plan.value,
            extra={"namespace": Namespace.OUTREACH_HISTORY.value},
        )
        return entry

    def get_outreach_history(self) -> List[OutreachHistory]:
        entries = [OutreachHistory.model_validate(d) for d in self.store.values(Namespace.OUTREACH_HISTORY)]
        return sorted(entries, key=lambda e: e.contacted_at, reverse=True)

    def find_outreach_by_url(self, url: str) -> Optional[OutreachHistory]:
        data = self.store.get(Namespace.OUTREACH_HISTORY, profile_id_for_url(url))
        if data is None:
            return None
        entry = OutreachHistory.model_validate(data)
        if canonical_profile_url(entry.target_linkedin_url) != canonical_profile_url(url):
            return None
        return entry

    # --- singletons (sync domain) ---------------------------------------------

    def get_user_profile(self) -> Optional[UserProfile]:
        data = self.store.get(Namespace.USER_PROFILE, SINGLETON_KEY)
        return UserProfile.model_validate(data) if data is not None else None

    def save_user_profile(self, profile: UserProfile) -> None:
        self.store.put(Namespace.USER_PROFILE, SINGLETON_KEY, profile.to_wire())

    def get_settings(self) -> ExtensionSettings:
        data = self.store.get(Namespace.SETTINGS, SINGLETON_KEY)
        return ExtensionSettings.model_validate(data) if data is not None else ExtensionSettings()

    def save_settings(self, updates: Dict[str, Any]) -> ExtensionSettings:
        """Merge a partial update into the stored settings."""
        merged = {**self.get_settings().to_wire(), **updates}
        settings = ExtensionSettings.model_validate(merged)
        self.store.put(Namespace.SETTINGS, SINGLETON_KEY, settings.to_wire())
        return settings

    def get_subscription_plan(self) -> SubscriptionPlan:
        data = self.store.get(Namespace.SUBSCRIPTION_PLAN, SINGLETON_KEY)
        if data is not None:
            return SubscriptionPlan.model_validate(data)
        user = self.get_user_profile()
        plan = SubscriptionPlan(user_id=user.id if user else DEFAULT_USER_ID, plan=PlanTier.FREE)
        self.save_subscription_plan(plan)
        return plan

    def save_subscription_plan(self, plan: SubscriptionPlan) -> None:
        self.store.put(Namespace.SUBSCRIPTION_PLAN, SINGLETON_KEY, plan.to_wire())

    # --- maintenance ----------------------------------------------------------

    def forget_profile(self, profile_id: str) -> int:
        """Privacy wipe: the profile plus every analysis, draft and outreach entry keyed by it."""
        removed = 0
        removed += self.store.delete(Namespace.TARGET_PROFILES, profile_id)
        for key in self.store.keys(Namespace.PROFILE_ANALYSES):
            if key.startswith(f"{profile_id}_"):
                removed += self.store.delete(Namespace.PROFILE_ANALYSES, key)
        removed += self.store.delete(Namespace.MESSAGE_DRAFTS, profile_id)
        removed += self.store.delete(Namespace.OUTREACH_HISTORY, profile_id)
        logger.info("Forgot profile %s (%d records)", profile_id, removed, extra={"step": "forget"})
        return removed

    def get_storage_usage(self) -> Dict[str, Dict[str, Any]]:
        usage: Dict[str, Dict[str, Any]] = {}
        for domain in QuotaDomain:
            q = self.store.quota_usage(domain)
            pct = round(q["used"] / q["capacity"] * 100) if q["capacity"] else 0
            usage[domain.value] = {**q, "percentage": pct}
        return usage

    def sweep(self) -> Dict[str, int]:
        return self.store.sweep_all()

    def clear_all_data(self, confirmation: str) -> int:
        if confirmation != CLEAR_ALL_CONFIRMATION:
            raise InvalidRequestError(f"Confirmation must be '{CLEAR_ALL_CONFIRMATION}'")
        return self.store.clear_all()
