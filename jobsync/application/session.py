from __future__ import annotations

import logging
from typing import Callable, Sequence

from jobsync.application.gateway import OperationGateway
from jobsync.application.poller import StatusPoller
from jobsync.application.state import ViewState
from jobsync.core.errors import OperationRejected
from jobsync.domain import quota
from jobsync.domain.models import DEFAULT_FIELDS, JobSnapshot, JobStatus, OperationOutcome
from jobsync.domain.suggestions import merge
from jobsync.infra.ports.jobs_api import JobApiPort
from jobsync.infra.ports.notifier import NotifierPort

logger = logging.getLogger(__name__)

Listener = Callable[["JobViewSession"], None]


class JobViewSession:
    """Interaction session of one job detail view, bound to one job id."""

    def __init__(
        self,
        *,
        api: JobApiPort,
        notifier: NotifierPort,
        job_id: str,
        interval_seconds: float = 3.0,
        defaults: Sequence[str] = DEFAULT_FIELDS,
    ):
        self.state = ViewState(job_id=job_id, defaults=tuple(defaults))
        self.gateway = OperationGateway(
            api=api,
            notifier=notifier,
            state=self.state,
            last_tick=lambda: self.poller.last_issued,
        )
        self.poller = StatusPoller(
            api=api,
            job_id=job_id,
            on_snapshot=self.apply_snapshot,
            interval_seconds=interval_seconds,
        )
        self.snapshots_applied = 0
        self._listeners: list[Listener] = []

    @property
    def job_id(self) -> str:
        return self.state.job_id

    @property
    def snapshot(self) -> JobSnapshot | None:
        return self.state.snapshot

    @property
    def closed(self) -> bool:
        return self.state.torn_down

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def start(self) -> None:
        if self.state.torn_down:
            raise RuntimeError(f"session for job {self.job_id} is already closed")
        self.poller.start()

    def close(self) -> None:
        self.state.torn_down = True
        self.poller.stop()

    async def aclose(self) -> None:
        self.state.torn_down = True
        await self.poller.aclose()

    def apply_snapshot(self, snapshot: JobSnapshot, sequence: int | None = None) -> None:
        """Fold one poll result into the session.

        ``sequence`` is the poller tick that produced ``snapshot``; snapshots
        applied without one are treated as current.
        """
        state = self.state
        if state.torn_down:
            return
        previous = state.snapshot
        if previous is not None:
            self._check_counters(previous, snapshot)

        state.snapshot = snapshot
        state.universe = merge(state.universe, snapshot.suggested_columns, defaults=state.defaults)

        if snapshot.status is JobStatus.EXTRACTING:
            state.extraction_in_flight = True
        elif snapshot.is_ready_for_extraction:
            if self._predates_extract(sequence):
                logger.debug(
                    "ready_snapshot_predates_extract job_id=%s seq=%s fence=%s",
                    self.job_id,
                    sequence,
                    state.extract_fence,
                )
            else:
                state.extraction_in_flight = False
                state.extract_fence = None

        if previous is not None and previous.is_ready_for_extraction and not snapshot.is_ready_for_extraction:
            state.selection.clear()

        if snapshot.discovered_keys():
            state.discovery_revealed = True

        self.snapshots_applied += 1
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("listener_failed job_id=%s listener=%r", self.job_id, listener)

    def _predates_extract(self, sequence: int | None) -> bool:
        state = self.state
        if state.extract_submitting:
            return True
        if state.extract_fence is None or sequence is None:
            return False
        return sequence <= state.extract_fence

    def _check_counters(self, previous: JobSnapshot, current: JobSnapshot) -> None:
        for name in ("suggestions_remaining", "extractions_remaining"):
            before = getattr(previous, name)
            after = getattr(current, name)
            if after > before:
                logger.warning(
                    "quota_counter_increased job_id=%s counter=%s before=%d after=%d",
                    self.job_id,
                    name,
                    before,
                    after,
                )

    def field_state(self, name: str) -> quota.FieldState:
        snapshot = self._require_snapshot()
        return quota.field_state(
            snapshot,
            name,
            selected=name in self.state.selection,
            extraction_in_flight=self.state.extraction_in_flight,
        )

    def can_suggest_more(self) -> bool:
        if self.state.snapshot is None:
            return False
        return quota.can_suggest_more(
            self.state.snapshot,
            suggestion_in_flight=self.state.suggestion_in_flight,
            extraction_in_flight=self.state.extraction_in_flight,
        )

    def can_extract(self) -> bool:
        if self.state.snapshot is None:
            return False
        return quota.can_extract(
            self.state.snapshot,
            selection_size=len(self.state.selection),
            extraction_in_flight=self.state.extraction_in_flight,
        )

    def toggle(self, name: str) -> bool:
        """Flip ``name`` in the selection; raise OperationRejected when the gate is closed."""
        snapshot = self._require_snapshot()
        if self.state.is_default(name):
            raise OperationRejected(f"{name!r} is a core field and is extracted automatically")
        if name not in self.state.universe:
            raise OperationRejected(f"{name!r} is not a known suggestion")
        allowed = quota.can_toggle(
            snapshot,
            name,
            selected=name in self.state.selection,
            extraction_in_flight=self.state.extraction_in_flight,
        )
        if not allowed:
            raise OperationRejected(f"{name!r} cannot be toggled right now")
        return self.state.selection.toggle(name)

    async def reveal_discovery(self) -> OperationOutcome | None:
        self.state.discovery_revealed = True
        if not self.state.discovered_suggestions():
            return await self.gateway.suggest_more()
        return None

    async def suggest_more(self) -> OperationOutcome:
        return await self.gateway.suggest_more()

    async def extract(self) -> OperationOutcome:
        return await self.gateway.extract()

    async def translate(self) -> OperationOutcome:
        return await self.gateway.translate()

    def _require_snapshot(self) -> JobSnapshot:
        if self.state.snapshot is None:
            raise OperationRejected("job has not been loaded yet")
        return self.state.snapshot


class JobDetailView:
    """Mount point that keeps exactly one live session per displayed job id."""

    def __init__(
        self,
        *,
        api: JobApiPort,
        notifier: NotifierPort,
        interval_seconds: float = 3.0,
        defaults: Sequence[str] = DEFAULT_FIELDS,
    ):
        self.api = api
        self.notifier = notifier
        self.interval_seconds = interval_seconds
        self.defaults = tuple(defaults)
        self.session: JobViewSession | None = None
        self._retired: list[JobViewSession] = []

    def show(self, job_id: str) -> JobViewSession:
        current = self.session
        if current is not None and current.job_id == job_id and not current.closed:
            return current
        if current is not None:
            logger.info("job_view_switch from=%s to=%s", current.job_id, job_id)
            current.close()
            self._retired.append(current)
        # Closed sessions are kept only while their last polls are outstanding.
        self._retired = [retired for retired in self._retired if not retired.poller.idle]

        session = JobViewSession(
            api=self.api,
            notifier=self.notifier,
            job_id=job_id,
            interval_seconds=self.interval_seconds,
            defaults=self.defaults,
        )
        self.session = session
        session.start()
        return session

    @property
    def retired_sessions(self) -> tuple[JobViewSession, ...]:
        return tuple(self._retired)

    async def unmount(self) -> None:
        sessions = self._retired + ([self.session] if self.session is not None else [])
        self.session = None
        self._retired = []
        for session in sessions:
            await session.aclose()
