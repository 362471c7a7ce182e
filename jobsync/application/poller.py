"""Fixed-cadence status polling bound to a single job identity."""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Callable

from jobsync.domain.models import JobSnapshot
from jobsync.infra.ports.jobs_api import JobApiPort

logger = logging.getLogger(__name__)

SnapshotHandler = Callable[[JobSnapshot, int], None]


class CancelToken:
    def __init__(self):
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class StatusPoller:
    """Fetch a job snapshot immediately and then every ``interval_seconds``.

    Ticks are fired on a fixed schedule and may overlap when the backend is
    slow. A response is handed to ``on_snapshot`` only while the token issued
    at ``start()`` is live and only if no newer tick has already been applied.
    Fetch failures and errors raised by ``on_snapshot`` are logged, counted
    in ``consecutive_failures`` and retried on the next tick.

    The poller knows nothing about merged or derived session state; its
    lifetime depends on ``job_id`` alone.
    """

    def __init__(
        self,
        *,
        api: JobApiPort,
        job_id: str,
        on_snapshot: SnapshotHandler,
        interval_seconds: float = 3.0,
    ):
        if not job_id:
            raise ValueError("job_id is required")
        self.api = api
        self.job_id = job_id
        self.interval_seconds = max(0.01, float(interval_seconds))
        self._on_snapshot = on_snapshot
        self._token: CancelToken | None = None
        self._timer: asyncio.Task | None = None
        self._in_flight: set[asyncio.Task] = set()
        self._sequence = itertools.count(1)
        self._last_applied = 0
        self._last_issued = 0
        self.consecutive_failures = 0

    @property
    def running(self) -> bool:
        return self._token is not None and not self._token.cancelled

    @property
    def last_issued(self) -> int:
        """Sequence number of the most recently fired tick, 0 before the first."""
        return self._last_issued

    @property
    def pending_ticks(self) -> int:
        return len(self._in_flight)

    @property
    def idle(self) -> bool:
        return not self.running and not self._in_flight

    def start(self) -> None:
        if self.running:
            return
        token = CancelToken()
        self._token = token
        self._timer = asyncio.get_running_loop().create_task(
            self._run(token), name=f"jobsync-poll-{self.job_id}"
        )
        logger.debug("poller_started job_id=%s interval=%.2fs", self.job_id, self.interval_seconds)

    def stop(self) -> None:
        """Stop the timer now; responses still in flight will be ignored."""
        if self._token is not None:
            self._token.cancel()
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        logger.debug("poller_stopped job_id=%s in_flight=%d", self.job_id, len(self._in_flight))

    async def aclose(self) -> None:
        self.stop()
        pending = list(self._in_flight)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _run(self, token: CancelToken) -> None:
        loop = asyncio.get_running_loop()
        while not token.cancelled:
            self._last_issued = next(self._sequence)
            task = loop.create_task(self._tick(token, self._last_issued))
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)
            await asyncio.sleep(self.interval_seconds)

    async def _tick(self, token: CancelToken, sequence: int) -> None:
        try:
            snapshot = await self.api.fetch_job(self.job_id)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if token.cancelled:
                return
            self.consecutive_failures += 1
            logger.warning(
                "poll_failed job_id=%s seq=%d failures=%d error=%s: %s",
                self.job_id,
                sequence,
                self.consecutive_failures,
                exc.__class__.__name__,
                exc,
            )
            return

        if token.cancelled:
            logger.debug("poll_discarded_after_teardown job_id=%s seq=%d", self.job_id, sequence)
            return
        if sequence <= self._last_applied:
            logger.debug(
                "poll_discarded_stale job_id=%s seq=%d last_applied=%d",
                self.job_id,
                sequence,
                self._last_applied,
            )
            return
        if snapshot.id != self.job_id:
            logger.warning("poll_identity_mismatch job_id=%s got=%s", self.job_id, snapshot.id)
            return

        self._last_applied = sequence
        try:
            self._on_snapshot(snapshot, sequence)
        except Exception:
            self.consecutive_failures += 1
            logger.exception(
                "snapshot_handler_failed job_id=%s seq=%d failures=%d",
                self.job_id,
                sequence,
                self.consecutive_failures,
            )
            return
        self.consecutive_failures = 0
