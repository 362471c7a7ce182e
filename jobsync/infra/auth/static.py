from __future__ import annotations

from jobsync.infra.ports.auth import TokenProviderPort


class StaticTokenProvider(TokenProviderPort):
    def __init__(self, token: str | None = None):
        self._token = token or None

    def get_token(self) -> str | None:
        return self._token

    def set_token(self, token: str | None) -> None:
        self._token = token or None

    def clear_token(self) -> None:
        self._token = None
