from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Mapping


class JobStatus(str, Enum):
    PENDING = "pending"
    TRANSCRIBING = "transcribing"
    EXTRACTING = "extracting"
    AWAITING_SELECTION = "awaiting_selection"
    COMPLETED = "completed"
    FAILED = "failed"


PROCESSING_STATUSES = frozenset({JobStatus.PENDING, JobStatus.TRANSCRIBING, JobStatus.EXTRACTING})
READY_STATUSES = frozenset({JobStatus.AWAITING_SELECTION, JobStatus.COMPLETED, JobStatus.FAILED})

NOT_MENTIONED = "Not mentioned"
NOT_APPLICABLE = "N/A"
NOT_FOUND = "Not found"
EXTRACTION_FAILED = "Extraction failed"

# Values meaning "attempted, no value".
SENTINEL_VALUES = frozenset({NOT_MENTIONED, NOT_APPLICABLE, NOT_FOUND, EXTRACTION_FAILED})
# The core field panel leaves "Extraction failed" out of its sentinel set.
CORE_SENTINEL_VALUES = frozenset({NOT_MENTIONED, NOT_APPLICABLE, NOT_FOUND})

DEFAULT_FIELDS: tuple[str, ...] = (
    "Property Type",
    "Location",
    "Price/Rent",
    "Size/Area",
    "Property Status (Rent/Sale)",
    "Furnishing",
    "Amenities",
    "Property Condition",
)


def is_processing(status: JobStatus) -> bool:
    return status in PROCESSING_STATUSES


def is_ready_for_extraction(status: JobStatus) -> bool:
    return status in READY_STATUSES


def is_actual_value(value: str | None, sentinels: frozenset[str] = SENTINEL_VALUES) -> bool:
    return bool(value) and value not in sentinels


@dataclass(frozen=True)
class JobSnapshot:
    """One poll's full view of a job. Replaced wholesale on every poll."""

    id: str
    status: JobStatus
    extracted_data: Mapping[str, str | None] = field(default_factory=dict)
    suggested_columns: tuple[str, ...] = ()
    suggestions_remaining: int = 0
    extractions_remaining: int = 0
    transcript: str | None = None
    error_message: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    title: str | None = None
    description: str | None = None
    video_url: str | None = None
    thumbnail_url: str | None = None

    @property
    def is_processing(self) -> bool:
        return is_processing(self.status)

    @property
    def is_ready_for_extraction(self) -> bool:
        return is_ready_for_extraction(self.status)

    def has_field(self, name: str) -> bool:
        return name in self.extracted_data

    def is_satisfied(self, name: str) -> bool:
        # Only the "Not mentioned" sentinel leaves a field open for another round.
        return name in self.extracted_data and self.extracted_data[name] != NOT_MENTIONED

    def discovered_keys(self) -> list[str]:
        return [key for key in self.extracted_data if key not in DEFAULT_FIELDS]


OutcomeStatus = Literal["succeeded", "failed", "rejected", "discarded"]


@dataclass(frozen=True)
class OperationOutcome:
    kind: str
    status: OutcomeStatus
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "succeeded"
