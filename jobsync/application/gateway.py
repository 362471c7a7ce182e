"""One-shot user operations against the job collaborator."""

from __future__ import annotations

import logging
from typing import Callable

from jobsync.application.state import ViewState
from jobsync.core.errors import JobApiError
from jobsync.domain.models import OperationOutcome
from jobsync.domain.suggestions import merge
from jobsync.infra.ports.jobs_api import JobApiPort
from jobsync.infra.ports.notifier import NotifierPort

logger = logging.getLogger(__name__)

SUGGEST = "suggest_more"
EXTRACT = "extract"
TRANSLATE = "translate"


class OperationGateway:
    """Issue suggest-more, extract and translate calls for one view.

    Each kind has its own re-entrancy flag on ``ViewState``. Failures leave
    the view as it was before the call, except that extract always clears
    the selection it submitted. Results that arrive after teardown are
    dropped without touching state or notifying.

    ``last_tick`` returns the sequence of the most recent poll tick. An
    accepted extract records it as ``extract_fence`` so that only polls
    fired afterwards can end the extraction freeze.
    """

    def __init__(
        self,
        *,
        api: JobApiPort,
        notifier: NotifierPort,
        state: ViewState,
        last_tick: Callable[[], int] | None = None,
    ):
        self.api = api
        self.notifier = notifier
        self.state = state
        self._last_tick = last_tick or (lambda: 0)

    def _rejected(self, kind: str, detail: str) -> OperationOutcome:
        logger.info("operation_rejected job_id=%s kind=%s reason=%s", self.state.job_id, kind, detail)
        return OperationOutcome(kind=kind, status="rejected", detail=detail)

    def _discarded(self, kind: str) -> OperationOutcome:
        logger.debug("operation_discarded_after_teardown job_id=%s kind=%s", self.state.job_id, kind)
        return OperationOutcome(kind=kind, status="discarded")

    def _failed(self, kind: str, exc: JobApiError) -> OperationOutcome:
        logger.warning(
            "operation_failed job_id=%s kind=%s status_code=%s error=%s",
            self.state.job_id,
            kind,
            exc.status_code,
            exc,
        )
        return OperationOutcome(kind=kind, status="failed", detail=str(exc))

    async def suggest_more(self) -> OperationOutcome:
        state = self.state
        if state.torn_down:
            return self._discarded(SUGGEST)
        if state.suggestion_in_flight:
            return self._rejected(SUGGEST, "suggestion request already in flight")
        if state.extraction_in_flight:
            return self._rejected(SUGGEST, "extraction in flight")
        if state.snapshot is not None and state.snapshot.suggestions_remaining <= 0:
            return self._rejected(SUGGEST, "suggestion quota exhausted")

        state.suggestion_in_flight = True
        toast_id = self.notifier.loading("Discovery subroutine connecting...")
        try:
            columns = await self.api.suggest_more(state.job_id)
        except JobApiError as exc:
            if state.torn_down:
                return self._discarded(SUGGEST)
            self.notifier.error("Discovery Subroutine Interrupted", toast_id=toast_id)
            return self._failed(SUGGEST, exc)
        finally:
            state.suggestion_in_flight = False

        if state.torn_down:
            return self._discarded(SUGGEST)
        before = len(state.universe)
        state.universe = merge(state.universe, columns, defaults=state.defaults)
        self.notifier.success("Additional patterns discovery complete", toast_id=toast_id)
        logger.info(
            "suggest_more_done job_id=%s received=%d added=%d",
            state.job_id,
            len(columns),
            len(state.universe) - before,
        )
        return OperationOutcome(kind=SUGGEST, status="succeeded")

    async def extract(self) -> OperationOutcome:
        state = self.state
        if state.torn_down:
            return self._discarded(EXTRACT)
        if state.extraction_in_flight:
            return self._rejected(EXTRACT, "extraction already in flight")
        if state.selection.is_empty():
            self.notifier.error("Select data points to extract")
            return self._rejected(EXTRACT, "selection is empty")
        if state.snapshot is not None and state.snapshot.extractions_remaining <= 0:
            return self._rejected(EXTRACT, "extraction quota exhausted")

        columns = state.selection.snapshot()
        # Submitted intent is consumed whatever the outcome.
        state.selection.clear()
        state.extraction_in_flight = True
        state.extract_submitting = True
        toast_id = self.notifier.loading("Initiating deep extraction...")
        try:
            await self.api.extract(state.job_id, columns)
        except JobApiError as exc:
            state.extract_submitting = False
            if state.torn_down:
                return self._discarded(EXTRACT)
            state.extraction_in_flight = False
            state.extract_fence = None
            self.notifier.error("Extraction Failed", toast_id=toast_id)
            return self._failed(EXTRACT, exc)

        state.extract_submitting = False
        state.extract_fence = self._last_tick()
        if state.torn_down:
            return self._discarded(EXTRACT)
        self.notifier.success("Extraction Subroutine Queued", toast_id=toast_id)
        logger.info(
            "extract_queued job_id=%s columns=%s fence=%d",
            state.job_id,
            list(columns),
            state.extract_fence,
        )
        return OperationOutcome(kind=EXTRACT, status="succeeded")

    async def translate(self) -> OperationOutcome:
        state = self.state
        if state.torn_down:
            return self._discarded(TRANSLATE)
        if state.translation_in_flight:
            return self._rejected(TRANSLATE, "translation already in flight")
        if state.translated_text is not None:
            return self._rejected(TRANSLATE, "transcript already translated")
        if state.snapshot is not None and not state.snapshot.transcript:
            return self._rejected(TRANSLATE, "no transcript to translate")

        state.translation_in_flight = True
        toast_id = self.notifier.loading("Initializing universal translator...")
        try:
            translated = await self.api.translate(state.job_id)
        except JobApiError as exc:
            if state.torn_down:
                return self._discarded(TRANSLATE)
            self.notifier.error("Universal Translator Offline", toast_id=toast_id)
            return self._failed(TRANSLATE, exc)
        finally:
            state.translation_in_flight = False

        if state.torn_down:
            return self._discarded(TRANSLATE)
        state.translated_text = translated
        self.notifier.success("Signal Translated to English", toast_id=toast_id)
        return OperationOutcome(kind=TRANSLATE, status="succeeded")
