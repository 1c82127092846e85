from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


def _as_bool(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    log_level: str

    # Core/runtime
    db_path: str
    run_env: str

    # Extraction retries
    extract_max_attempts: int
    extract_backoff_seconds: float
    extract_nudge_pause_seconds: float

    # Storage quota domains (bytes)
    sync_quota_bytes: int
    local_quota_bytes: int
    sweep_interval_seconds: float

    # Downstream analysis/generation backend
    analysis_api_url: str | None
    analysis_api_token: str | None
    request_timeout_seconds: int

    # Content/extraction
    profile_url_markers: list[str] = field(default_factory=lambda: ["linkedin.com/in/"])

    # Logging/tracing
    call_trace: bool = False
    call_log_path: str = "logs/service_calls.jsonl"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    return Settings(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        db_path=os.getenv("DB_PATH", "colder.db"),
        run_env=os.getenv("RUN_ENV", "local"),
        extract_max_attempts=int(os.getenv("EXTRACT_MAX_ATTEMPTS", "3")),
        extract_backoff_seconds=float(os.getenv("EXTRACT_BACKOFF_SECONDS", "2.0")),
        extract_nudge_pause_seconds=float(os.getenv("EXTRACT_NUDGE_PAUSE_SECONDS", "1.0")),
        sync_quota_bytes=int(os.getenv("SYNC_QUOTA_BYTES", "102400")),
        local_quota_bytes=int(os.getenv("LOCAL_QUOTA_BYTES", "10485760")),
        sweep_interval_seconds=float(os.getenv("SWEEP_INTERVAL_SECONDS", "86400")),
        analysis_api_url=os.getenv("ANALYSIS_API_URL"),
        analysis_api_token=os.getenv("ANALYSIS_API_TOKEN"),
        request_timeout_seconds=int(os.getenv("REQUEST_TIMEOUT", "30")),
        profile_url_markers=[
            "linkedin.com/in/",
        ],
        call_trace=_as_bool(os.getenv("CALL_TRACE", "false")),
        call_log_path=os.getenv("CALL_LOG_PATH", "logs/service_calls.jsonl"),
    )
