from __future__ import annotations

from abc import ABC, abstractmethod


class NotifierPort(ABC):
    """Transient user-facing notifications (toasts)."""

    @abstractmethod
    def loading(self, message: str) -> str:
        """Show a pending indicator and return its id."""

    @abstractmethod
    def success(self, message: str, *, toast_id: str | None = None) -> None:
        """Replace ``toast_id`` (or show a new notice) with a success message."""

    @abstractmethod
    def error(self, message: str, *, toast_id: str | None = None) -> None:
        """Replace ``toast_id`` (or show a new notice) with a failure message."""
