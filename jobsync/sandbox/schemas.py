from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class VideoCreateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    video_url: str | None = None
    transcript: str | None = None
    fail_stage: Literal["transcription", "extraction"] | None = None


class VideoDetailResponse(BaseModel):
    id: str
    status: str
    title: str | None = None
    description: str | None = None
    video_url: str | None = None
    thumbnail_url: str | None = None
    extracted_data: dict[str, str | None] = Field(default_factory=dict)
    suggested_columns: list[str] = Field(default_factory=list)
    suggestions_remaining: int
    extractions_remaining: int
    transcript: str | None = None
    error_message: str | None = None
    created_at: str


class SuggestMoreResponse(BaseModel):
    suggested_columns: list[str]
    suggestions_remaining: int


class ExtractRequest(BaseModel):
    selected_columns: list[str]


class ExtractResponse(BaseModel):
    status: str
    selected_columns: list[str]


class TranslateResponse(BaseModel):
    translated_text: str
