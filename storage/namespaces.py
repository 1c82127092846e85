"""
Namespaces, quota domains and the fixed retention policy table.

The sync domain is small and holds only singleton-per-user records; every
collection lives in the local domain.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Dict, Optional


class QuotaDomain(str, Enum):
    SYNC = "sync"
    LOCAL = "local"


DOMAIN_CAPACITY: Dict[QuotaDomain, int] = {
    QuotaDomain.SYNC: 100 * 1024,
    QuotaDomain.LOCAL: 10 * 1024 * 1024,
}


class Namespace(str, Enum):
    TARGET_PROFILES = "targetProfiles"
    PROFILE_ANALYSES = "profileAnalyses"
    MESSAGE_DRAFTS = "messageDrafts"
    OUTREACH_HISTORY = "outreachHistory"
    USER_PROFILE = "userProfile"
    SETTINGS = "settings"
    SUBSCRIPTION_PLAN = "subscriptionPlan"


@dataclass(frozen=True)
class NamespacePolicy:
    namespace: Namespace
    domain: QuotaDomain
    ttl: Optional[timedelta]
    schema_version: int = 1
    # Paid-tier override; only outreach history keeps records indefinitely
    paid_ttl: Optional[timedelta] = None
    tier_dependent: bool = False


POLICIES: Dict[Namespace, NamespacePolicy] = {
    Namespace.TARGET_PROFILES: NamespacePolicy(
        Namespace.TARGET_PROFILES, QuotaDomain.LOCAL, timedelta(hours=24)
    ),
    Namespace.PROFILE_ANALYSES: NamespacePolicy(
        Namespace.PROFILE_ANALYSES, QuotaDomain.LOCAL, timedelta(hours=24)
    ),
    Namespace.MESSAGE_DRAFTS: NamespacePolicy(
        Namespace.MESSAGE_DRAFTS, QuotaDomain.LOCAL, timedelta(days=7)
    ),
    Namespace.OUTREACH_HISTORY: NamespacePolicy(
        Namespace.OUTREACH_HISTORY,
        QuotaDomain.LOCAL,
        timedelta(days=5),
        paid_ttl=None,
        tier_dependent=True,
    ),
    Namespace.USER_PROFILE: NamespacePolicy(Namespace.USER_PROFILE, QuotaDomain.SYNC, None),
    Namespace.SETTINGS: NamespacePolicy(Namespace.SETTINGS, QuotaDomain.SYNC, None),
    Namespace.SUBSCRIPTION_PLAN: NamespacePolicy(Namespace.SUBSCRIPTION_PLAN, QuotaDomain.SYNC, None),
}


def ttl_for(policy: NamespacePolicy, paid: bool = False) -> Optional[timedelta]:
    """None means the record never expires."""
    if policy.tier_dependent and paid:
        return policy.paid_ttl
    return policy.ttl


def record_size(namespace: str, key: str, payload: str) -> int:
    """Bytes charged against the domain for one stored record."""
    return len(f"{namespace}:{key}".encode("utf-8")) + len(payload.encode("utf-8"))
