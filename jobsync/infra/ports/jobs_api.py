from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from jobsync.domain.models import JobSnapshot


class JobApiPort(ABC):
    @abstractmethod
    async def fetch_job(self, job_id: str) -> JobSnapshot:
        """Return the current server snapshot of a job."""

    @abstractmethod
    async def suggest_more(self, job_id: str) -> list[str]:
        """Ask the backend for additional candidate field names."""

    @abstractmethod
    async def extract(self, job_id: str, selected_columns: Sequence[str]) -> None:
        """Queue an extraction round. The effect is observed on a later fetch."""

    @abstractmethod
    async def translate(self, job_id: str) -> str:
        """Return an English translation of the job transcript."""

    async def aclose(self) -> None:
        """Release transport resources. Adapters without any may ignore this."""
