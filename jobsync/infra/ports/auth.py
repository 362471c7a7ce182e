from __future__ import annotations

from abc import ABC, abstractmethod


class TokenProviderPort(ABC):
    @abstractmethod
    def get_token(self) -> str | None:
        """Return the current bearer token, if any."""

    @abstractmethod
    def clear_token(self) -> None:
        """Forget the stored token after the backend rejected it."""
