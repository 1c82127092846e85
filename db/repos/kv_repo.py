from __future__ import annotations

import sqlite3
import threading
from typing import Any, List, Optional, Tuple

from errors import StorageAccessError


class SQLiteKVRepo:
    """Backing store for both quota domains in one SQLite table."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self._lock = threading.RLock()

    def _query(self, sql: str, params: Tuple = (), fetch: str = "one") -> Any:
        """Run a read and fetch its rows while holding the connection lock."""
        try:
            with self._lock:
                cur = self.conn.execute(sql, params)
                return cur.fetchall() if fetch == "all" else cur.fetchone()
        except sqlite3.Error as e:
            raise StorageAccessError(f"Storage backend failure: {e}") from e

    def _modify(self, sql: str, params: Tuple = ()) -> int:
        """Run a write, commit it, and return the affected row count."""
        try:
            with self._lock:
                cur = self.conn.execute(sql, params)
                self.conn.commit()
                return cur.rowcount
        except sqlite3.Error as e:
            raise StorageAccessError(f"Storage backend failure: {e}") from e

    def read(self, domain: str, namespace: str, key: str) -> Optional[str]:
        sql = "SELECT value FROM kv_records WHERE domain=? AND namespace=? AND key=?;"
        row = self._query(sql, (domain, namespace, key))
        return row[0] if row else None

    def write(self, domain: str, namespace: str, key: str, value: str, size_bytes: int) -> None:
        sql = (
            "INSERT INTO kv_records (domain, namespace, key, value, size_bytes, updated_at) "
            "VALUES (?, ?, ?, ?, ?, datetime('now')) "
            "ON CONFLICT(domain, namespace, key) DO UPDATE SET "
            "value=excluded.value, size_bytes=excluded.size_bytes, updated_at=excluded.updated_at;"
        )
        self._modify(sql, (domain, namespace, key, value, size_bytes))

    def remove(self, domain: str, namespace: str, key: str) -> bool:
        sql = "DELETE FROM kv_records WHERE domain=? AND namespace=? AND key=?;"
        return self._modify(sql, (domain, namespace, key)) > 0

    def items(self, domain: str, namespace: str) -> List[Tuple[str, str]]:
        sql = "SELECT key, value FROM kv_records WHERE domain=? AND namespace=? ORDER BY key ASC;"
        return [(r[0], r[1]) for r in self._query(sql, (domain, namespace), fetch="all")]

    def record_size(self, domain: str, namespace: str, key: str) -> int:
        sql = "SELECT size_bytes FROM kv_records WHERE domain=? AND namespace=? AND key=?;"
        row = self._query(sql, (domain, namespace, key))
        return int(row[0]) if row else 0

    def usage(self, domain: str) -> int:
        sql = "SELECT used_bytes FROM v_domain_usage WHERE domain=?;"
        row = self._query(sql, (domain,))
        return int(row[0]) if row else 0

    def clear(self, domain: Optional[str] = None) -> int:
        if domain is None:
            return self._modify("DELETE FROM kv_records;")
        return self._modify("DELETE FROM kv_records WHERE domain=?;", (domain,))
