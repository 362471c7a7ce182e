"""Render-failure containment for individual views."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RenderFault:
    """Recoverable stand-in shown in place of a view that failed to render."""

    key: str
    error_type: str
    message: str
    reload_label: str = "RELOAD VIEW"


class FaultBoundary(Generic[T]):
    """Run ``render`` and turn any exception it raises into a ``RenderFault``.

    Once faulted the boundary keeps returning the same fault without calling
    ``render`` again until ``reload()`` is invoked.
    """

    def __init__(
        self,
        key: str,
        render: Callable[[], T],
        *,
        on_reload: Callable[[], None] | None = None,
    ):
        self.key = key
        self._render = render
        self._on_reload = on_reload
        self._fault: RenderFault | None = None

    @property
    def fault(self) -> RenderFault | None:
        return self._fault

    def render(self) -> T | RenderFault:
        if self._fault is not None:
            return self._fault
        try:
            return self._render()
        except Exception as exc:
            logger.exception("render_failed view=%s error=%s", self.key, exc.__class__.__name__)
            self._fault = RenderFault(key=self.key, error_type=exc.__class__.__name__, message=str(exc))
            return self._fault

    def reload(self) -> T | RenderFault:
        self._fault = None
        if self._on_reload is not None:
            self._on_reload()
        return self.render()


class ViewHost:
    """Renders a set of independent views, each behind its own boundary."""

    def __init__(self):
        self._boundaries: dict[str, FaultBoundary] = {}

    def mount(self, boundary: FaultBoundary) -> None:
        self._boundaries[boundary.key] = boundary

    def unmount(self, key: str) -> None:
        self._boundaries.pop(key, None)

    def get(self, key: str) -> FaultBoundary | None:
        return self._boundaries.get(key)

    def render_all(self) -> dict[str, object]:
        return {key: boundary.render() for key, boundary in self._boundaries.items()}

    def faults(self) -> dict[str, RenderFault]:
        return {
            key: boundary.fault
            for key, boundary in self._boundaries.items()
            if boundary.fault is not None
        }
