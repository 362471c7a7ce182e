"""Per-action enablement derived from server counters and job status."""

from __future__ import annotations

from enum import Enum

from jobsync.domain.models import JobSnapshot


class FieldState(str, Enum):
    SATISFIED = "satisfied"
    SELECTABLE = "selectable"
    BLOCKED = "blocked"


def field_state(
    snapshot: JobSnapshot,
    name: str,
    *,
    selected: bool,
    extraction_in_flight: bool,
) -> FieldState:
    if snapshot.is_satisfied(name):
        return FieldState.SATISFIED
    if extraction_in_flight:
        return FieldState.BLOCKED
    # A field armed before the count hit zero can still be toggled off.
    if selected or snapshot.extractions_remaining > 0:
        return FieldState.SELECTABLE
    return FieldState.BLOCKED


def can_suggest_more(
    snapshot: JobSnapshot,
    *,
    suggestion_in_flight: bool,
    extraction_in_flight: bool,
) -> bool:
    return snapshot.suggestions_remaining > 0 and not suggestion_in_flight and not extraction_in_flight


def can_extract(
    snapshot: JobSnapshot,
    *,
    selection_size: int,
    extraction_in_flight: bool,
) -> bool:
    return selection_size > 0 and not extraction_in_flight and snapshot.extractions_remaining > 0


def can_toggle(
    snapshot: JobSnapshot,
    name: str,
    *,
    selected: bool,
    extraction_in_flight: bool,
) -> bool:
    state = field_state(snapshot, name, selected=selected, extraction_in_flight=extraction_in_flight)
    return state is FieldState.SELECTABLE
