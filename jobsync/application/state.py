from __future__ import annotations

from dataclasses import dataclass, field

from jobsync.domain.models import DEFAULT_FIELDS, JobSnapshot
from jobsync.domain.selection import SelectionTracker
from jobsync.domain.suggestions import discovered, initial_universe


@dataclass
class ViewState:
    """Everything one job view owns for the lifetime of a job identity."""

    job_id: str
    defaults: tuple[str, ...] = DEFAULT_FIELDS
    snapshot: JobSnapshot | None = None
    universe: tuple[str, ...] = ()
    selection: SelectionTracker = field(default_factory=SelectionTracker)
    extraction_in_flight: bool = False
    # Ready snapshots from ticks fired before the extract was accepted
    # (sequence at or below ``extract_fence``) leave the freeze in place.
    extract_submitting: bool = False
    extract_fence: int | None = None
    suggestion_in_flight: bool = False
    translation_in_flight: bool = False
    # Session-only cache; never written back into a snapshot.
    translated_text: str | None = None
    discovery_revealed: bool = False
    torn_down: bool = False

    def __post_init__(self) -> None:
        if not self.universe:
            self.universe = initial_universe(self.defaults)

    def discovered_suggestions(self) -> list[str]:
        return discovered(self.universe, defaults=self.defaults)

    def is_default(self, name: str) -> bool:
        return name in self.defaults
