from __future__ import annotations

import sqlite3


def bootstrap(conn: sqlite3.Connection) -> None:
    """Create the key/value schema and indexes (idempotent)."""
    cur = conn.cursor()

    # One row per stored record; size_bytes is what the record costs against its domain quota
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS kv_records (\n"
            "  domain TEXT NOT NULL,\n"
            "  namespace TEXT NOT NULL,\n"
            "  key TEXT NOT NULL,\n"
            "  value TEXT NOT NULL,\n"
            "  size_bytes INTEGER NOT NULL,\n"
            "  updated_at TEXT NOT NULL DEFAULT (datetime('now')),\n"
            "  PRIMARY KEY (domain, namespace, key)\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_kv_records_domain ON kv_records(domain);")

    # Per-domain usage without decoding any values
    cur.execute(
        (
            "CREATE VIEW IF NOT EXISTS v_domain_usage AS\n"
            "SELECT domain, COUNT(*) AS records, COALESCE(SUM(size_bytes), 0) AS used_bytes\n"
            "FROM kv_records GROUP BY domain"
        )
    )

    conn.commit()
