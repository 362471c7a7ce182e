"""Presentation-independent view model of a job detail view."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from jobsync.application.state import ViewState
from jobsync.domain import quota
from jobsync.domain.models import CORE_SENTINEL_VALUES, NOT_MENTIONED, JobSnapshot, JobStatus, is_actual_value

UNKNOWN_FAILURE_MESSAGE = "An unknown error occurred during signal processing."
_EXTRACTION_ERROR_PREFIX = "Extraction Error: "


@dataclass(frozen=True)
class CoreFieldView:
    name: str
    display: str
    is_actual_value: bool
    scanning: bool


@dataclass(frozen=True)
class FieldChipView:
    name: str
    state: str
    selected: bool
    enabled: bool


@dataclass(frozen=True)
class InsightView:
    name: str
    display: str
    is_actual_value: bool


@dataclass(frozen=True)
class JobView:
    job_id: str
    loading: bool
    status: str | None = None
    title: str = "Unknown Stream"
    description: str | None = None
    created_at: str | None = None
    video_url: str | None = None
    thumbnail_url: str | None = None
    is_processing: bool = False
    is_ready_for_extraction: bool = False
    processing_label: str | None = None
    failure_banner: str | None = None
    extraction_notice: str | None = None
    core_fields: tuple[CoreFieldView, ...] = ()
    discovery_revealed: bool = False
    chips: tuple[FieldChipView, ...] = ()
    insights: tuple[InsightView, ...] = ()
    selected: tuple[str, ...] = ()
    transcript: str | None = None
    translation_active: bool = False
    can_translate: bool = False
    translating: bool = False
    can_suggest_more: bool = False
    suggesting: bool = False
    suggestions_remaining: int = 0
    can_extract: bool = False
    extractions_remaining: int = 0
    max_extractions: int = 3
    extract_label: str = "INITIATE EXTRACTION"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def optimized_video_url(url: str | None) -> str | None:
    if not url or "cloudinary.com" not in url:
        return url
    if "/upload/" in url:
        return url.replace("/upload/", "/upload/f_auto,q_auto,vc_h264/", 1)
    return url


def _core_field(snapshot: JobSnapshot, name: str) -> CoreFieldView:
    if not snapshot.has_field(name):
        scanning = snapshot.is_processing
        return CoreFieldView(
            name=name,
            display="SCANNING..." if scanning else "NOT FOUND",
            is_actual_value=False,
            scanning=scanning,
        )
    value = snapshot.extracted_data.get(name)
    return CoreFieldView(
        name=name,
        display=value or NOT_MENTIONED,
        is_actual_value=is_actual_value(value, CORE_SENTINEL_VALUES),
        scanning=False,
    )


def _extraction_notice(snapshot: JobSnapshot) -> str | None:
    message = snapshot.error_message
    if not message or "Extraction" not in message or snapshot.status is JobStatus.FAILED:
        return None
    return message.replace(_EXTRACTION_ERROR_PREFIX, "")


def _extract_label(state: ViewState, snapshot: JobSnapshot) -> str:
    if state.extraction_in_flight:
        return "PROCESSOR BUSY..."
    if snapshot.extractions_remaining == 0:
        return "PIPELINE DEPLETED"
    return "INITIATE EXTRACTION"


def build_job_view(state: ViewState, *, max_extractions: int = 3) -> JobView:
    snapshot = state.snapshot
    if snapshot is None:
        return JobView(job_id=state.job_id, loading=True, max_extractions=max_extractions)

    chips = []
    for name in state.discovered_suggestions():
        selected = name in state.selection
        chip_state = quota.field_state(
            snapshot,
            name,
            selected=selected,
            extraction_in_flight=state.extraction_in_flight,
        )
        chips.append(
            FieldChipView(
                name=name,
                state=chip_state.value,
                selected=selected,
                enabled=chip_state is quota.FieldState.SELECTABLE,
            )
        )

    insights = tuple(
        InsightView(name=key, display=value or NOT_MENTIONED, is_actual_value=is_actual_value(value))
        for key, value in snapshot.extracted_data.items()
        if not state.is_default(key) and value is not None
    )

    processing_label = None
    if snapshot.is_processing:
        processing_label = (
            "DECODING AUDIO STREAM" if snapshot.status is JobStatus.TRANSCRIBING else "EXTRACTING PATTERNS"
        )

    transcript = state.translated_text or snapshot.transcript
    return JobView(
        job_id=state.job_id,
        loading=False,
        status=snapshot.status.value,
        title=snapshot.title or "Unknown Stream",
        description=snapshot.description,
        created_at=snapshot.created_at.isoformat(),
        video_url=optimized_video_url(snapshot.video_url),
        thumbnail_url=snapshot.thumbnail_url,
        is_processing=snapshot.is_processing,
        is_ready_for_extraction=snapshot.is_ready_for_extraction,
        processing_label=processing_label,
        failure_banner=(snapshot.error_message or UNKNOWN_FAILURE_MESSAGE)
        if snapshot.status is JobStatus.FAILED
        else None,
        extraction_notice=_extraction_notice(snapshot),
        core_fields=tuple(_core_field(snapshot, name) for name in state.defaults),
        discovery_revealed=state.discovery_revealed,
        chips=tuple(chips),
        insights=insights,
        selected=state.selection.snapshot(),
        transcript=transcript,
        translation_active=state.translated_text is not None,
        can_translate=bool(snapshot.transcript) and state.translated_text is None and not state.translation_in_flight,
        translating=state.translation_in_flight,
        can_suggest_more=quota.can_suggest_more(
            snapshot,
            suggestion_in_flight=state.suggestion_in_flight,
            extraction_in_flight=state.extraction_in_flight,
        ),
        suggesting=state.suggestion_in_flight,
        suggestions_remaining=snapshot.suggestions_remaining,
        can_extract=quota.can_extract(
            snapshot,
            selection_size=len(state.selection),
            extraction_in_flight=state.extraction_in_flight,
        ),
        extractions_remaining=snapshot.extractions_remaining,
        max_extractions=max_extractions,
        extract_label=_extract_label(state, snapshot),
    )
