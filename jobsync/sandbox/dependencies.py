from __future__ import annotations

from functools import lru_cache

from jobsync.core.config import get_settings
from jobsync.sandbox.extractor import FieldExtractorPort, MockFieldExtractor
from jobsync.sandbox.store import SandboxStore


@lru_cache(maxsize=1)
def get_extractor() -> FieldExtractorPort:
    return MockFieldExtractor()


@lru_cache(maxsize=1)
def get_store() -> SandboxStore:
    settings = get_settings()
    return SandboxStore(
        extractor=get_extractor(),
        suggestion_quota=settings.sandbox_suggestion_quota,
        extraction_quota=settings.sandbox_extraction_quota,
        stage_delay_ms=settings.sandbox_stage_delay_ms,
    )


async def provide_store() -> SandboxStore:
    return get_store()
