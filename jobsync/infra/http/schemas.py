"""Response contracts of the job collaborator."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobsync.domain.models import JobSnapshot, JobStatus


class JobResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    status: JobStatus
    extracted_data: dict[str, str | None] | None = None
    suggested_columns: list[str] | None = None
    suggestions_remaining: int = Field(default=0, ge=0)
    extractions_remaining: int = Field(default=0, ge=0)
    transcript: str | None = None
    error_message: str | None = None
    created_at: datetime
    title: str | None = None
    description: str | None = None
    video_url: str | None = None
    thumbnail_url: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def to_snapshot(self) -> JobSnapshot:
        return JobSnapshot(
            id=self.id,
            status=self.status,
            extracted_data=dict(self.extracted_data or {}),
            suggested_columns=tuple(self.suggested_columns or ()),
            suggestions_remaining=self.suggestions_remaining,
            extractions_remaining=self.extractions_remaining,
            transcript=self.transcript,
            error_message=self.error_message,
            created_at=self.created_at,
            title=self.title,
            description=self.description,
            video_url=self.video_url,
            thumbnail_url=self.thumbnail_url,
        )


class SuggestMoreResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    suggested_columns: list[str] | None = None


class ExtractRequest(BaseModel):
    selected_columns: list[str]


class TranslateResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    translated_text: str
