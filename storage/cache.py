"""
TTL-aware namespaced key/value store over two quota domains.

Records are wrapped in a small versioned envelope before they reach the
backing store. Expiry is lazy: a read that finds an expired record deletes
it and reports a miss. Sweeps remove expired records proactively. Writes
never evict; a write that does not fit raises StorageQuotaExceededError.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from errors import StorageQuotaExceededError
from models.base import WireModel, utcnow
from ports.storage import BackingStorePort
from storage.namespaces import (
    DOMAIN_CAPACITY,
    POLICIES,
    Namespace,
    NamespacePolicy,
    QuotaDomain,
    record_size,
    ttl_for,
)

logger = logging.getLogger(__name__)


Clock = Callable[[], datetime]
NamespaceLike = Union[Namespace, str]


class Envelope(WireModel):
    v: int
    created_at: datetime
    expires_at: Optional[datetime] = None
    data: Dict[str, Any]


@dataclass(frozen=True)
class Entry:
    key: str
    data: Dict[str, Any]
    created_at: datetime
    expires_at: Optional[datetime]


class NamespacedStore:
    def __init__(
        self,
        backend: BackingStorePort,
        clock: Optional[Clock] = None,
        capacities: Optional[Dict[QuotaDomain, int]] = None,
    ):
        self.backend = backend
        self.clock = clock or utcnow
        self.capacities: Dict[QuotaDomain, int] = dict(DOMAIN_CAPACITY)
        if capacities:
            self.capacities.update(capacities)
        self._locks = {ns: threading.RLock() for ns in Namespace}
        self._domain_locks = {d: threading.RLock() for d in QuotaDomain}

    # --- helpers --------------------------------------------------------------

    @staticmethod
    def policy(namespace: NamespaceLike) -> NamespacePolicy:
        return POLICIES[Namespace(namespace)]

    def _is_expired(self, envelope: Envelope) -> bool:
        return envelope.expires_at is not None and self.clock() > envelope.expires_at

    def _load(self, policy: NamespacePolicy, key: str, raw: str) -> Optional[Envelope]:
        """Decode one stored record; stale, corrupt or expired ones are deleted."""
        ns = policy.namespace.value
        try:
            envelope = Envelope.model_validate_json(raw)
        except ValidationError:
            logger.warning(
                "Dropping unreadable record %s:%s", ns, key, extra={"namespace": ns}
            )
            self.backend.remove(policy.domain.value, ns, key)
            return None
        if envelope.v != policy.schema_version:
            logger.info(
                "Dropping record %s:%s with schema v%s (current v%s)",
                ns,
                key,
                envelope.v,
                policy.schema_version,
                extra={"namespace": ns},
            )
            self.backend.remove(policy.domain.value, ns, key)
            return None
        if self._is_expired(envelope):
            logger.debug("Expired on read %s:%s", ns, key, extra={"namespace": ns, "status": "expired"})
            self.backend.remove(policy.domain.value, ns, key)
            return None
        return envelope

    @staticmethod
    def _entry(key: str, envelope: Envelope) -> Entry:
        return Entry(
            key=key,
            data=envelope.data,
            created_at=envelope.created_at,
            expires_at=envelope.expires_at,
        )

    # --- per-key operations ---------------------------------------------------

    def get_entry(self, namespace: NamespaceLike, key: str) -> Optional[Entry]:
        policy = self.policy(namespace)
        with self._locks[policy.namespace]:
            raw = self.backend.read(policy.domain.value, policy.namespace.value, key)
            if raw is None:
                return None
            envelope = self._load(policy, key, raw)
            return self._entry(key, envelope) if envelope is not None else None

    def get(self, namespace: NamespaceLike, key: str) -> Optional[Dict[str, Any]]:
        entry = self.get_entry(namespace, key)
        return entry.data if entry is not None else None

    def put(
        self,
        namespace: NamespaceLike,
        key: str,
        data: Dict[str, Any],
        *,
        created_at: Optional[datetime] = None,
        paid: bool = False,
    ) -> Entry:
        """Write one record; expiresAt is fixed now from the policy table (and tier)."""
        policy = self.policy(namespace)
        ns = policy.namespace.value
        domain = policy.domain
        created = created_at or self.clock()
        ttl = ttl_for(policy, paid=paid)
        envelope = Envelope(
            v=policy.schema_version,
            created_at=created,
            expires_at=created + ttl if ttl is not None else None,
            data=data,
        )
        payload = envelope.model_dump_json(by_alias=True)
        size = record_size(ns, key, payload)

        with self._locks[policy.namespace], self._domain_locks[domain]:
            used = self.backend.usage(domain.value)
            existing = self.backend.record_size(domain.value, ns, key)
            capacity = self.capacities[domain]
            if used - existing + size > capacity:
                logger.warning(
                    "Quota exceeded writing %s:%s (%d bytes, %d/%d used)",
                    ns,
                    key,
                    size,
                    used,
                    capacity,
                    extra={"namespace": ns, "status": "quota_exceeded"},
                )
                raise StorageQuotaExceededError(domain.value, used, capacity, size)
            self.backend.write(domain.value, ns, key, payload, size)
        return self._entry(key, envelope)

    def delete(self, namespace: NamespaceLike, key: str) -> bool:
        policy = self.policy(namespace)
        with self._locks[policy.namespace]:
            return self.backend.remove(policy.domain.value, policy.namespace.value, key)

    # --- namespace-wide operations --------------------------------------------

    def entries(self, namespace: NamespaceLike) -> List[Entry]:
        """Live records of a namespace; expired ones met along the way are removed."""
        policy = self.policy(namespace)
        out: List[Entry] = []
        with self._locks[policy.namespace]:
            for key, raw in self.backend.items(policy.domain.value, policy.namespace.value):
                envelope = self._load(policy, key, raw)
                if envelope is not None:
                    out.append(self._entry(key, envelope))
        return out

    def values(self, namespace: NamespaceLike) -> List[Dict[str, Any]]:
        return [e.data for e in self.entries(namespace)]

    def keys(self, namespace: NamespaceLike) -> List[str]:
        return [e.key for e in self.entries(namespace)]

    def sweep_expired(self, namespace: NamespaceLike) -> int:
        policy = self.policy(namespace)
        ns = policy.namespace.value
        with self._locks[policy.namespace]:
            rows: List[Tuple[str, str]] = self.backend.items(policy.domain.value, ns)
            removed = sum(1 for key, raw in rows if self._load(policy, key, raw) is None)
        if removed:
            logger.info("Swept %d expired record(s) from %s", removed, ns, extra={"namespace": ns, "step": "sweep"})
        return removed

    def sweep_all(self) -> Dict[str, int]:
        return {ns.value: self.sweep_expired(ns) for ns in Namespace}

    def quota_usage(self, domain: Union[QuotaDomain, str]) -> Dict[str, int]:
        d = QuotaDomain(domain)
        return {"used": self.backend.usage(d.value), "capacity": self.capacities[d]}

    def clear_all(self) -> int:
        removed = 0
        for domain in QuotaDomain:
            with self._domain_locks[domain]:
                removed += self.backend.clear(domain.value)
        logger.info("Cleared %d record(s) from all namespaces", removed, extra={"step": "clear_all"})
        return removed
