from __future__ import annotations

from functools import lru_cache
from typing import Callable

import httpx

from jobsync.application.session import JobDetailView, JobViewSession
from jobsync.core.config import get_settings
from jobsync.infra.auth.static import StaticTokenProvider
from jobsync.infra.http.client import HttpJobApi
from jobsync.infra.notify.log_notifier import LoggingNotifier
from jobsync.infra.ports.auth import TokenProviderPort
from jobsync.infra.ports.jobs_api import JobApiPort
from jobsync.infra.ports.notifier import NotifierPort
from jobsync.presentation.boundary import FaultBoundary
from jobsync.presentation.view import JobView, build_job_view


@lru_cache(maxsize=1)
def get_token_provider() -> TokenProviderPort:
    return StaticTokenProvider(get_settings().access_token)


def build_job_api(
    *,
    tokens: TokenProviderPort | None = None,
    on_unauthorized: Callable[[], None] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> JobApiPort:
    settings = get_settings()
    return HttpJobApi(
        base_url=settings.api_url,
        tokens=tokens or get_token_provider(),
        timeout_seconds=settings.request_timeout_seconds,
        max_retries=settings.max_retries,
        on_unauthorized=on_unauthorized,
        transport=transport,
    )


def build_detail_view(*, api: JobApiPort, notifier: NotifierPort | None = None) -> JobDetailView:
    return JobDetailView(
        api=api,
        notifier=notifier or LoggingNotifier(),
        interval_seconds=get_settings().poll_interval_seconds,
    )


def session_boundary(session: JobViewSession, *, max_extractions: int | None = None) -> FaultBoundary[JobView]:
    limit = get_settings().max_extractions if max_extractions is None else max_extractions
    return FaultBoundary(session.job_id, lambda: build_job_view(session.state, max_extractions=limit))
