"""Suggestion universe merging."""

from __future__ import annotations

from typing import Iterable, Sequence

from jobsync.domain.models import DEFAULT_FIELDS


def initial_universe(defaults: Sequence[str] = DEFAULT_FIELDS) -> tuple[str, ...]:
    return merge((), (), defaults=defaults)


def merge(
    universe: Sequence[str],
    newly_observed: Iterable[str] | None,
    *,
    defaults: Sequence[str] = DEFAULT_FIELDS,
) -> tuple[str, ...]:
    """Return the ordered union of ``universe`` and ``newly_observed``.

    Defaults always come first in their declared order; every other name keeps
    the position at which it was first seen. Blank names are dropped. Merging
    names that are already known returns an equal tuple.
    """
    seen: set[str] = set()
    ordered: list[str] = []

    def _add(name: object) -> None:
        if not isinstance(name, str):
            return
        cleaned = name.strip()
        if not cleaned or cleaned in seen:
            return
        seen.add(cleaned)
        ordered.append(cleaned)

    for name in defaults:
        _add(name)
    for name in universe:
        _add(name)
    for name in newly_observed or ():
        _add(name)
    return tuple(ordered)


def discovered(universe: Sequence[str], *, defaults: Sequence[str] = DEFAULT_FIELDS) -> list[str]:
    default_set = set(defaults)
    return [name for name in universe if name not in default_set]
