from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_API_URL = "http://localhost:8000/api/v1"


def _load_dotenv() -> None:
    if os.getenv("JOBSYNC_SKIP_DOTENV") == "1":
        return

    env_path = Path(__file__).resolve().parents[2] / ".env"
    if not env_path.exists():
        return

    from dotenv import load_dotenv

    load_dotenv(env_path, override=False)


def _parse_non_negative_int(value: str | None, default: int = 0) -> int:
    if value is None:
        return default
    raw = value.strip()
    if not raw:
        return default
    try:
        return max(0, int(raw))
    except ValueError:
        return default


def _parse_positive_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    raw = value.strip()
    if not raw:
        return default
    try:
        parsed = float(raw)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


@dataclass(frozen=True)
class Settings:
    api_url: str
    poll_interval_seconds: float
    request_timeout_seconds: float
    max_retries: int
    access_token: str | None
    max_extractions: int
    log_level: str
    sandbox_suggestion_quota: int
    sandbox_extraction_quota: int
    sandbox_stage_delay_ms: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_dotenv()

    api_url = (os.getenv("JOBSYNC_API_URL") or DEFAULT_API_URL).strip().rstrip("/") or DEFAULT_API_URL
    poll_interval_ms = _parse_non_negative_int(os.getenv("JOBSYNC_POLL_INTERVAL_MS"), default=3000) or 3000
    log_level = (os.getenv("JOBSYNC_LOG_LEVEL") or "INFO").strip().upper() or "INFO"

    return Settings(
        api_url=api_url,
        poll_interval_seconds=poll_interval_ms / 1000.0,
        request_timeout_seconds=_parse_positive_float(os.getenv("JOBSYNC_REQUEST_TIMEOUT_SECONDS"), default=15.0),
        max_retries=_parse_non_negative_int(os.getenv("JOBSYNC_MAX_RETRIES"), default=1),
        access_token=os.getenv("JOBSYNC_ACCESS_TOKEN") or None,
        max_extractions=_parse_non_negative_int(os.getenv("JOBSYNC_MAX_EXTRACTIONS"), default=3),
        log_level=log_level,
        sandbox_suggestion_quota=_parse_non_negative_int(os.getenv("JOBSYNC_SANDBOX_SUGGESTION_QUOTA"), default=3),
        sandbox_extraction_quota=_parse_non_negative_int(os.getenv("JOBSYNC_SANDBOX_EXTRACTION_QUOTA"), default=3),
        sandbox_stage_delay_ms=_parse_non_negative_int(os.getenv("JOBSYNC_SANDBOX_STAGE_DELAY_MS"), default=0),
    )
