from __future__ import annotations

import threading
from typing import Dict, List, Optional, Tuple


class InMemoryBackingStore:
    """Dict-backed store with the same contract as SQLiteKVRepo (tests, ephemeral hosts)."""

    def __init__(self) -> None:
        self._rows: Dict[Tuple[str, str, str], Tuple[str, int]] = {}
        self._lock = threading.RLock()

    def read(self, domain: str, namespace: str, key: str) -> Optional[str]:
        with self._lock:
            row = self._rows.get((domain, namespace, key))
            return row[0] if row else None

    def write(self, domain: str, namespace: str, key: str, value: str, size_bytes: int) -> None:
        with self._lock:
            self._rows[(domain, namespace, key)] = (value, size_bytes)

    def remove(self, domain: str, namespace: str, key: str) -> bool:
        with self._lock:
            return self._rows.pop((domain, namespace, key), None) is not None

    def items(self, domain: str, namespace: str) -> List[Tuple[str, str]]:
        with self._lock:
            return sorted(
                (k[2], v[0]) for k, v in self._rows.items() if k[0] == domain and k[1] == namespace
            )

    def record_size(self, domain: str, namespace: str, key: str) -> int:
        with self._lock:
            row = self._rows.get((domain, namespace, key))
            return row[1] if row else 0

    def usage(self, domain: str) -> int:
        with self._lock:
            return sum(v[1] for k, v in self._rows.items() if k[0] == domain)

    def clear(self, domain: Optional[str] = None) -> int:
        with self._lock:
            doomed = [k for k in self._rows if domain is None or k[0] == domain]
            for k in doomed:
                del self._rows[k]
            return len(doomed)
