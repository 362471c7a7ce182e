import asyncio

import httpx
import pytest

from jobsync.application.session import JobViewSession
from jobsync.core.errors import JobApiError
from jobsync.domain.models import DEFAULT_FIELDS, JobStatus
from jobsync.infra.auth.static import StaticTokenProvider
from jobsync.infra.http.client import HttpJobApi
from jobsync.infra.notify.memory import MemoryNotifier
from jobsync.sandbox.dependencies import get_store
from jobsync.sandbox.main import app
from jobsync.sandbox.store import DEFAULT_TRANSCRIPT
from tests.fakes import wait_until

BASE_URL = "http://testserver/api/v1"


@pytest.fixture(autouse=True)
def fresh_store():
    get_store.cache_clear()
    yield
    get_store.cache_clear()


async def _create_job(transport, **payload):
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post("/api/v1/videos", json=payload)
        response.raise_for_status()
        return response.json()


def _api(transport):
    return HttpJobApi(
        base_url=BASE_URL,
        tokens=StaticTokenProvider("tok_sandbox"),
        retry_backoff_seconds=0,
        transport=transport,
    )


def test_healthz():
    async def scenario():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            return await client.get("/healthz")

    response = asyncio.run(scenario())

    assert response.status_code == 200
    assert response.json() == {"ok": "true"}


def test_pipeline_walk_and_operations_through_http_client():
    async def scenario():
        transport = httpx.ASGITransport(app=app)
        created = await _create_job(transport, title="Loft on Main")
        api = _api(transport)
        try:
            job_id = created["id"]
            walk = [(await api.fetch_job(job_id)) for _ in range(3)]
            suggested = await api.suggest_more(job_id)
            after_suggest = await api.fetch_job(job_id)
            await api.extract(job_id, ["Parking", "Floor Level"])
            done = await api.fetch_job(job_id)
            translated = await api.translate(job_id)
            return created, walk, suggested, after_suggest, done, translated
        finally:
            await api.aclose()

    created, walk, suggested, after_suggest, done, translated = asyncio.run(scenario())

    assert created["status"] == "pending"
    assert created["id"].startswith("vid_")
    assert [snapshot.status for snapshot in walk] == [
        JobStatus.TRANSCRIBING,
        JobStatus.EXTRACTING,
        JobStatus.COMPLETED,
    ]
    completed = walk[-1]
    assert set(DEFAULT_FIELDS) <= set(completed.extracted_data)
    assert completed.suggested_columns == ("Parking", "View", "Balcony")
    assert completed.title == "Loft on Main"

    assert suggested == ["Pet Policy", "Floor Level", "Security"]
    assert after_suggest.suggestions_remaining == completed.suggestions_remaining - 1

    assert done.status is JobStatus.COMPLETED
    assert done.extractions_remaining == completed.extractions_remaining - 1
    assert done.extracted_data["Parking"] == "One covered spot"
    assert done.extracted_data["Floor Level"] == "12th floor"
    assert translated == f"[EN] {DEFAULT_TRANSCRIPT}"


def test_backend_rejections_surface_as_job_api_errors():
    async def scenario():
        transport = httpx.ASGITransport(app=app)
        created = await _create_job(transport)
        api = _api(transport)
        errors = {}
        try:
            job_id = created["id"]
            try:
                await api.extract(job_id, ["Parking"])
            except JobApiError as exc:
                errors["busy"] = exc
            for _ in range(3):
                await api.fetch_job(job_id)
            try:
                await api.extract(job_id, [])
            except JobApiError as exc:
                errors["empty"] = exc
            get_store().get_job(job_id).extractions_remaining = 0
            try:
                await api.extract(job_id, ["Parking"])
            except JobApiError as exc:
                errors["quota"] = exc
            try:
                await api.fetch_job("vid_missing")
            except JobApiError as exc:
                errors["missing"] = exc
        finally:
            await api.aclose()
        return errors

    errors = asyncio.run(scenario())

    assert errors["busy"].status_code == 409
    assert "still processing" in str(errors["busy"])
    assert errors["empty"].status_code == 422
    assert errors["quota"].status_code == 409
    assert "No extraction subroutines remaining" in str(errors["quota"])
    assert errors["missing"].status_code == 404


def test_suggestion_quota_runs_out():
    async def scenario():
        transport = httpx.ASGITransport(app=app)
        created = await _create_job(transport)
        api = _api(transport)
        try:
            job_id = created["id"]
            for _ in range(3):
                await api.fetch_job(job_id)
            batches = [await api.suggest_more(job_id) for _ in range(3)]
            with pytest.raises(JobApiError) as excinfo:
                await api.suggest_more(job_id)
            return batches, excinfo.value, await api.fetch_job(job_id)
        finally:
            await api.aclose()

    batches, error, final = asyncio.run(scenario())

    assert all(batch for batch in batches)
    assert error.status_code == 409
    assert final.suggestions_remaining == 0


def test_failed_transcription_reports_reason():
    async def scenario():
        transport = httpx.ASGITransport(app=app)
        created = await _create_job(transport, fail_stage="transcription")
        api = _api(transport)
        try:
            return [await api.fetch_job(created["id"]) for _ in range(2)]
        finally:
            await api.aclose()

    walk = asyncio.run(scenario())

    assert walk[-1].status is JobStatus.FAILED
    assert walk[-1].error_message.startswith("Transcription Error")
    assert walk[-1].transcript is None


def test_session_follows_a_sandbox_job_to_completion():
    async def scenario():
        transport = httpx.ASGITransport(app=app)
        created = await _create_job(transport)
        api = _api(transport)
        notifier = MemoryNotifier()
        session = JobViewSession(api=api, notifier=notifier, job_id=created["id"], interval_seconds=0.01)
        counters = []
        session.add_listener(
            lambda s: counters.append((s.snapshot.suggestions_remaining, s.snapshot.extractions_remaining))
        )
        session.start()
        try:
            await wait_until(lambda: session.snapshot is not None and session.snapshot.status is JobStatus.COMPLETED)
            session.toggle("Parking")
            outcome = await session.extract()
            await wait_until(
                lambda: "Parking" in session.snapshot.extracted_data and not session.state.extraction_in_flight
            )
            translated = await session.translate()
            return session, notifier, counters, outcome, translated
        finally:
            await session.aclose()
            await api.aclose()

    session, notifier, counters, outcome, translated = asyncio.run(scenario())

    assert outcome.status == "succeeded"
    assert translated.status == "succeeded"
    assert session.state.translated_text == f"[EN] {DEFAULT_TRANSCRIPT}"
    assert session.state.selection.is_empty()
    assert session.snapshot.extractions_remaining == 2
    assert "Extraction Subroutine Queued" in notifier.messages("success")
    for earlier, later in zip(counters, counters[1:]):
        assert later[0] <= earlier[0]
        assert later[1] <= earlier[1]
