import asyncio
import logging

import pytest

from jobsync.application.session import JobViewSession
from jobsync.core.errors import OperationRejected
from jobsync.domain.models import DEFAULT_FIELDS
from jobsync.domain.quota import FieldState
from jobsync.infra.notify.memory import MemoryNotifier
from tests.fakes import FakeJobApi, make_snapshot, wait_until


def _session(api=None):
    api = api or FakeJobApi()
    return JobViewSession(api=api, notifier=MemoryNotifier(), job_id="vid_1", interval_seconds=10), api


def test_snapshot_suggestions_are_merged_into_the_universe():
    session, _api = _session()

    session.apply_snapshot(make_snapshot(suggested_columns=["Parking"]))
    session.apply_snapshot(make_snapshot(suggested_columns=[]))
    session.apply_snapshot(make_snapshot(suggested_columns=["View", "Parking"]))

    assert session.state.universe == (*DEFAULT_FIELDS, "Parking", "View")
    assert session.snapshots_applied == 3


def test_extracting_status_freezes_and_ready_status_unfreezes():
    session, _api = _session()

    session.apply_snapshot(make_snapshot(status="extracting"))
    assert session.state.extraction_in_flight is True

    session.apply_snapshot(make_snapshot(status="awaiting_selection"))
    assert session.state.extraction_in_flight is False


def test_selection_cleared_when_status_leaves_ready_state():
    session, _api = _session()
    session.apply_snapshot(make_snapshot(status="completed", suggested_columns=["Parking"]))
    session.toggle("Parking")

    session.apply_snapshot(make_snapshot(status="completed"))
    assert session.state.selection.items == ("Parking",)

    session.apply_snapshot(make_snapshot(status="extracting"))
    assert session.state.selection.is_empty()


def test_selected_field_survives_quota_drop_but_cannot_be_reselected():
    session, _api = _session()
    session.apply_snapshot(make_snapshot(suggested_columns=["Parking", "View", "Balcony"], extractions_remaining=1))
    session.toggle("Balcony")

    session.apply_snapshot(make_snapshot(extractions_remaining=0))

    assert session.field_state("Parking") is FieldState.BLOCKED
    assert session.field_state("View") is FieldState.BLOCKED
    assert session.field_state("Balcony") is FieldState.SELECTABLE

    assert session.toggle("Balcony") is False
    assert session.field_state("Balcony") is FieldState.BLOCKED
    with pytest.raises(OperationRejected):
        session.toggle("Balcony")


def test_toggle_rejects_core_and_unknown_fields():
    session, _api = _session()
    with pytest.raises(OperationRejected):
        session.toggle("Parking")

    session.apply_snapshot(make_snapshot())
    with pytest.raises(OperationRejected):
        session.toggle("Location")
    with pytest.raises(OperationRejected):
        session.toggle("Parking")


def test_counter_increase_is_logged(caplog):
    session, _api = _session()
    session.apply_snapshot(make_snapshot(extractions_remaining=1))

    with caplog.at_level(logging.WARNING, logger="jobsync.application.session"):
        session.apply_snapshot(make_snapshot(extractions_remaining=2))

    assert "quota_counter_increased" in caplog.text
    assert session.snapshot.extractions_remaining == 2


def test_discovery_reveals_itself_when_discovered_values_exist():
    session, _api = _session()
    session.apply_snapshot(make_snapshot(extracted_data={"Location": "Downtown"}))
    assert session.state.discovery_revealed is False

    session.apply_snapshot(make_snapshot(extracted_data={"Location": "Downtown", "Parking": "One spot"}))
    assert session.state.discovery_revealed is True


def test_reveal_discovery_requests_suggestions_only_when_none_known():
    async def scenario():
        session, api = _session()
        api.suggest_results = [["Parking", "View"]]
        session.apply_snapshot(make_snapshot())
        first = await session.reveal_discovery()
        second = await session.reveal_discovery()
        return session, api, first, second

    session, api, first, second = asyncio.run(scenario())
    assert first.ok
    assert second is None
    assert api.suggest_calls == ["vid_1"]
    assert session.state.discovered_suggestions() == ["Parking", "View"]


def test_gateway_calls_do_not_block_polling():
    async def scenario():
        api = FakeJobApi(make_snapshot("vid_1", suggested_columns=["Parking"]))
        api.extract_gate = asyncio.Event()
        session = JobViewSession(api=api, notifier=MemoryNotifier(), job_id="vid_1", interval_seconds=0.01)
        session.start()
        await wait_until(lambda: session.snapshot is not None)
        session.toggle("Parking")

        pending = asyncio.create_task(session.extract())
        polled_before = api.count_fetches("vid_1")
        await wait_until(lambda: api.count_fetches("vid_1") >= polled_before + 3)
        api.extract_gate.set()
        outcome = await pending
        await session.aclose()
        return outcome

    outcome = asyncio.run(scenario())
    assert outcome.ok


def test_closed_session_ignores_late_snapshots():
    session, _api = _session()
    session.close()

    session.apply_snapshot(make_snapshot())

    assert session.snapshot is None
    with pytest.raises(RuntimeError):
        session.start()


def test_ready_snapshot_during_extract_submission_keeps_the_freeze():
    async def scenario():
        session, api = _session()
        api.extract_gate = asyncio.Event()
        session.apply_snapshot(make_snapshot(suggested_columns=["Parking", "View"]))
        session.toggle("Parking")

        pending = asyncio.create_task(session.extract())
        await wait_until(lambda: api.extract_calls)
        session.apply_snapshot(make_snapshot())
        during_submit = session.state.extraction_in_flight

        api.extract_gate.set()
        outcome = await pending
        fence = session.state.extract_fence
        session.apply_snapshot(make_snapshot(), fence)
        at_fence = session.state.extraction_in_flight
        session.apply_snapshot(make_snapshot(), fence + 1)
        return outcome, during_submit, at_fence, session

    outcome, during_submit, at_fence, session = asyncio.run(scenario())
    assert outcome.ok
    assert during_submit is True
    assert at_fence is True
    assert session.state.extraction_in_flight is False
    assert session.state.extract_fence is None


def test_poll_fired_before_extract_cannot_unfreeze_chips():
    async def scenario():
        api = FakeJobApi()
        gate = asyncio.Event()
        backend = {"done": False}

        async def handler(job_id, call_number):
            fired_before_extract = not api.extract_calls
            if call_number == 1:
                return make_snapshot(job_id, suggested_columns=["Parking", "View"])
            await gate.wait()
            if backend["done"]:
                return make_snapshot(job_id, extracted_data={"Parking": "One spot"}, extractions_remaining=2)
            if fired_before_extract:
                return make_snapshot(job_id, suggested_columns=["Parking", "View"])
            return make_snapshot(job_id, status="extracting", extractions_remaining=2)

        api.fetch_handler = handler
        session = JobViewSession(api=api, notifier=MemoryNotifier(), job_id="vid_1", interval_seconds=0.01)
        session.start()
        await wait_until(lambda: session.snapshot is not None)
        session.toggle("Parking")
        await wait_until(lambda: api.count_fetches("vid_1") >= 2)

        outcome = await session.extract()
        fetched = api.count_fetches("vid_1")
        gate.set()
        await wait_until(lambda: api.count_fetches("vid_1") >= fetched + 3)
        await asyncio.sleep(0.03)
        frozen = session.state.extraction_in_flight
        try:
            session.toggle("View")
            toggle_allowed = True
        except OperationRejected:
            toggle_allowed = False

        backend["done"] = True
        await wait_until(lambda: not session.state.extraction_in_flight)
        await session.aclose()
        return outcome, frozen, toggle_allowed, session

    outcome, frozen, toggle_allowed, session = asyncio.run(scenario())
    assert outcome.ok
    assert frozen is True
    assert toggle_allowed is False
    assert session.snapshot.extracted_data == {"Parking": "One spot"}
    assert session.snapshot.extractions_remaining == 2


def test_failing_listener_does_not_starve_the_others(caplog):
    session, _api = _session()
    seen = []

    def broken(_session):
        raise KeyError("status")

    session.add_listener(broken)
    session.add_listener(lambda s: seen.append(s.snapshot.status.value))

    with caplog.at_level(logging.ERROR, logger="jobsync.application.session"):
        session.apply_snapshot(make_snapshot())
        session.apply_snapshot(make_snapshot(status="awaiting_selection"))

    assert seen == ["completed", "awaiting_selection"]
    assert caplog.text.count("listener_failed") == 2
    assert session.snapshots_applied == 2
