from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Sequence
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from jobsync.core.errors import JobApiError, SnapshotParseError, UnauthorizedError
from jobsync.domain.models import JobSnapshot
from jobsync.infra.http.schemas import ExtractRequest, JobResponse, SuggestMoreResponse, TranslateResponse
from jobsync.infra.ports.auth import TokenProviderPort
from jobsync.infra.ports.jobs_api import JobApiPort

logger = logging.getLogger(__name__)


class BearerTokenAuth(httpx.Auth):
    """Attach the stored token and drop it when the backend answers 401."""

    def __init__(self, tokens: TokenProviderPort, on_unauthorized: Callable[[], None] | None = None):
        self._tokens = tokens
        self._on_unauthorized = on_unauthorized

    def auth_flow(self, request: httpx.Request):
        token = self._tokens.get_token()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        response = yield request
        if response.status_code == 401:
            logger.warning("unauthorized_response path=%s clearing_token=1", request.url.path)
            self._tokens.clear_token()
            if self._on_unauthorized is not None:
                self._on_unauthorized()


def _extract_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:300]
    if isinstance(body, dict):
        return str(body.get("error_message") or body.get("detail") or body.get("message") or body)
    return str(body)


class HttpJobApi(JobApiPort):
    def __init__(
        self,
        *,
        base_url: str,
        tokens: TokenProviderPort,
        timeout_seconds: float = 15.0,
        max_retries: int = 0,
        retry_backoff_seconds: float = 1.2,
        on_unauthorized: Callable[[], None] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.max_retries = max(0, int(max_retries))
        self.retry_backoff_seconds = max(0.0, float(retry_backoff_seconds))
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_seconds,
            auth=BearerTokenAuth(tokens, on_unauthorized),
            transport=transport,
        )

    def _backoff(self, attempt: int) -> float:
        return min(6.0, self.retry_backoff_seconds * (attempt + 1))

    @staticmethod
    def _is_retryable_http(status_code: int) -> bool:
        return status_code in {408, 429, 500, 502, 503, 504}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        json: dict[str, Any] | None = None,
        retry: bool = True,
    ) -> Any:
        attempts = (self.max_retries if retry else 0) + 1
        for attempt in range(attempts):
            last = attempt == attempts - 1
            try:
                response = await self._client.request(method, path, json=json)
            except httpx.TimeoutException as exc:
                if not last:
                    await asyncio.sleep(self._backoff(attempt))
                    continue
                raise JobApiError(f"{operation} timed out: {exc}", operation=operation) from exc
            except httpx.HTTPError as exc:
                raise JobApiError(f"{operation} connection error: {exc}", operation=operation) from exc

            if response.status_code == 401:
                raise UnauthorizedError(f"{operation} unauthorized", operation=operation, status_code=401)
            if response.status_code >= 400:
                if self._is_retryable_http(response.status_code) and not last:
                    await asyncio.sleep(self._backoff(attempt))
                    continue
                raise JobApiError(
                    f"{operation} failed ({response.status_code}): {_extract_detail(response)}",
                    operation=operation,
                    status_code=response.status_code,
                )
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as exc:
                raise SnapshotParseError(
                    f"{operation} returned a non-JSON body",
                    operation=operation,
                    status_code=response.status_code,
                ) from exc
        raise JobApiError(f"{operation} exhausted {attempts} attempts", operation=operation)

    @staticmethod
    def _parse(model, body: Any, *, operation: str):
        try:
            return model.model_validate(body)
        except ValidationError as exc:
            raise SnapshotParseError(f"{operation} response invalid: {exc}", operation=operation) from exc

    async def fetch_job(self, job_id: str) -> JobSnapshot:
        body = await self._request("GET", f"/videos/{quote(job_id, safe='')}", operation="fetch_job")
        return self._parse(JobResponse, body, operation="fetch_job").to_snapshot()

    async def suggest_more(self, job_id: str) -> list[str]:
        body = await self._request(
            "POST",
            f"/extractions/suggest-more/{quote(job_id, safe='')}",
            operation="suggest_more",
        )
        parsed = self._parse(SuggestMoreResponse, body or {}, operation="suggest_more")
        return list(parsed.suggested_columns or [])

    async def extract(self, job_id: str, selected_columns: Sequence[str]) -> None:
        payload = ExtractRequest(selected_columns=list(selected_columns)).model_dump()
        # Not retried: every accepted call consumes one extraction.
        await self._request(
            "POST",
            f"/extractions/extract/{quote(job_id, safe='')}",
            operation="extract",
            json=payload,
            retry=False,
        )

    async def translate(self, job_id: str) -> str:
        body = await self._request("POST", f"/videos/{quote(job_id, safe='')}/translate", operation="translate")
        return self._parse(TranslateResponse, body, operation="translate").translated_text

    async def aclose(self) -> None:
        await self._client.aclose()
