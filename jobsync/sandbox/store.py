"""In-memory job store that walks jobs through the media pipeline."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Sequence

from jobsync.domain.models import DEFAULT_FIELDS, EXTRACTION_FAILED, JobStatus
from jobsync.sandbox.extractor import FieldExtractorPort
from jobsync.utils.ids import new_job_id

logger = logging.getLogger(__name__)

DEFAULT_TRANSCRIPT = (
    "Bienvenue dans cet appartement au centre-ville, 85 metres carres, "
    "loyer de 2 400 par mois, semi-meuble, avec salle de sport et piscine sur le toit."
)
SUGGESTION_BATCH_SIZE = 3


class SandboxConflict(Exception):
    def __init__(self, error_code: str, message: str):
        super().__init__(message)
        self.error_code = error_code
        self.message = message


@dataclass
class SandboxJob:
    job_id: str
    title: str | None
    description: str | None
    video_url: str | None
    source_transcript: str
    suggestions_remaining: int
    extractions_remaining: int
    fail_stage: str | None = None
    status: JobStatus = JobStatus.PENDING
    transcript: str | None = None
    extracted_data: dict[str, str | None] = field(default_factory=dict)
    suggested_columns: list[str] = field(default_factory=list)
    known_columns: list[str] = field(default_factory=list)
    pending_columns: list[str] = field(default_factory=list)
    error_message: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    stage_started_at: float = field(default_factory=time.monotonic)

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.job_id,
            "status": self.status.value,
            "title": self.title,
            "description": self.description,
            "video_url": self.video_url,
            "thumbnail_url": None,
            "extracted_data": dict(self.extracted_data),
            "suggested_columns": list(self.suggested_columns),
            "suggestions_remaining": self.suggestions_remaining,
            "extractions_remaining": self.extractions_remaining,
            "transcript": self.transcript,
            "error_message": self.error_message,
            "created_at": self.created_at.isoformat(),
        }


class SandboxStore:
    def __init__(
        self,
        *,
        extractor: FieldExtractorPort,
        suggestion_quota: int = 3,
        extraction_quota: int = 3,
        stage_delay_ms: int = 0,
    ):
        self.extractor = extractor
        self.suggestion_quota = max(0, suggestion_quota)
        self.extraction_quota = max(0, extraction_quota)
        self.stage_delay_seconds = max(0.0, stage_delay_ms / 1000.0)
        self._jobs: dict[str, SandboxJob] = {}
        self._lock = threading.Lock()

    def create_job(
        self,
        *,
        title: str | None = None,
        description: str | None = None,
        video_url: str | None = None,
        transcript: str | None = None,
        fail_stage: str | None = None,
    ) -> SandboxJob:
        job = SandboxJob(
            job_id=new_job_id(),
            title=title,
            description=description,
            video_url=video_url,
            source_transcript=transcript or DEFAULT_TRANSCRIPT,
            suggestions_remaining=self.suggestion_quota,
            extractions_remaining=self.extraction_quota,
            fail_stage=fail_stage,
        )
        with self._lock:
            self._jobs[job.job_id] = job
        logger.info("sandbox_job_created job_id=%s fail_stage=%s", job.job_id, fail_stage)
        return job

    def get_job(self, job_id: str) -> SandboxJob | None:
        with self._lock:
            return self._jobs.get(job_id)

    def observe(self, job_id: str) -> SandboxJob | None:
        """Return the job after moving it forward at most one pipeline stage."""
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            if job.status in (JobStatus.PENDING, JobStatus.TRANSCRIBING, JobStatus.EXTRACTING):
                if time.monotonic() - job.stage_started_at >= self.stage_delay_seconds:
                    self._advance(job)
            return job

    def _set_status(self, job: SandboxJob, status: JobStatus) -> None:
        logger.debug("sandbox_transition job_id=%s %s->%s", job.job_id, job.status.value, status.value)
        job.status = status
        job.stage_started_at = time.monotonic()

    def _advance(self, job: SandboxJob) -> None:
        if job.status is JobStatus.PENDING:
            self._set_status(job, JobStatus.TRANSCRIBING)
            return

        if job.status is JobStatus.TRANSCRIBING:
            if job.fail_stage == "transcription":
                job.error_message = "Transcription Error: audio stream could not be decoded"
                self._set_status(job, JobStatus.FAILED)
                return
            job.transcript = job.source_transcript
            job.pending_columns = list(DEFAULT_FIELDS)
            self._set_status(job, JobStatus.EXTRACTING)
            return

        first_round = not job.extracted_data
        columns = job.pending_columns
        job.pending_columns = []
        if job.fail_stage == "extraction" and not first_round:
            for column in columns:
                job.extracted_data[column] = EXTRACTION_FAILED
            job.error_message = "Extraction Error: the model returned no usable answer"
        else:
            job.extracted_data.update(
                self.extractor.extract_fields(transcript=job.transcript or "", columns=columns)
            )
            job.error_message = None

        if first_round:
            batch = self.extractor.suggest_fields(
                transcript=job.transcript or "",
                exclude=[*DEFAULT_FIELDS, *job.known_columns],
                limit=SUGGESTION_BATCH_SIZE,
            )
            job.known_columns.extend(batch)
            job.suggested_columns = batch
        self._set_status(job, JobStatus.COMPLETED)

    def suggest_more(self, job_id: str) -> list[str] | None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            if job.suggestions_remaining <= 0:
                raise SandboxConflict("SUGGESTION_QUOTA_EXCEEDED", "No suggestion cycles remaining.")
            job.suggestions_remaining -= 1
            batch = self.extractor.suggest_fields(
                transcript=job.transcript or "",
                exclude=[*DEFAULT_FIELDS, *job.known_columns],
                limit=SUGGESTION_BATCH_SIZE,
            )
            job.known_columns.extend(batch)
            job.suggested_columns = batch
            return list(batch)

    def start_extraction(self, job_id: str, columns: Sequence[str]) -> SandboxJob | None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            if job.status in (JobStatus.PENDING, JobStatus.TRANSCRIBING, JobStatus.EXTRACTING):
                raise SandboxConflict("JOB_BUSY", "Job is still processing.")
            if job.transcript is None:
                raise SandboxConflict("TRANSCRIPT_MISSING", "Job has no transcript to extract from.")
            if job.extractions_remaining <= 0:
                raise SandboxConflict("EXTRACTION_QUOTA_EXCEEDED", "No extraction subroutines remaining.")
            job.extractions_remaining -= 1
            job.pending_columns = list(dict.fromkeys(columns))
            self._set_status(job, JobStatus.EXTRACTING)
            return job

    def translate(self, job_id: str) -> str | None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            if not job.transcript:
                raise SandboxConflict("TRANSCRIPT_MISSING", "Job has no transcript yet.")
            return self.extractor.translate(transcript=job.transcript)
