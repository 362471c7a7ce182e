"""Deterministic stand-in for the backend AI pipeline."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from jobsync.domain.models import NOT_MENTIONED

SUGGESTION_POOL: tuple[str, ...] = (
    "Parking",
    "View",
    "Balcony",
    "Pet Policy",
    "Floor Level",
    "Security",
    "Nearby Schools",
    "Public Transport",
    "Maintenance Fee",
    "Move-in Date",
    "Lease Term",
    "Heating/Cooling",
)

_KNOWN_VALUES = {
    "Property Type": "Apartment",
    "Location": "Downtown, near the central station",
    "Price/Rent": "2,400 per month",
    "Size/Area": "85 sqm",
    "Property Status (Rent/Sale)": "Rent",
    "Furnishing": "Semi-furnished",
    "Amenities": "Gym, rooftop pool",
    "Parking": "One covered spot",
    "View": "City skyline",
    "Balcony": "Yes, south facing",
    "Floor Level": "12th floor",
}


class FieldExtractorPort(ABC):
    @abstractmethod
    def extract_fields(self, *, transcript: str, columns: Sequence[str]) -> dict[str, str]:
        """Return a value (or a sentinel) for every requested column."""

    @abstractmethod
    def suggest_fields(self, *, transcript: str, exclude: Sequence[str], limit: int) -> list[str]:
        """Return up to ``limit`` new candidate field names."""

    @abstractmethod
    def translate(self, *, transcript: str) -> str:
        """Return an English rendition of ``transcript``."""


class MockFieldExtractor(FieldExtractorPort):
    provider_name = "mock"

    def extract_fields(self, *, transcript: str, columns: Sequence[str]) -> dict[str, str]:
        return {column: _KNOWN_VALUES.get(column, NOT_MENTIONED) for column in columns}

    def suggest_fields(self, *, transcript: str, exclude: Sequence[str], limit: int) -> list[str]:
        excluded = set(exclude)
        return [name for name in SUGGESTION_POOL if name not in excluded][: max(0, limit)]

    def translate(self, *, transcript: str) -> str:
        return f"[EN] {transcript}"
