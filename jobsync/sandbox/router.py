from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from jobsync.sandbox.dependencies import provide_store
from jobsync.sandbox.schemas import (
    ExtractRequest,
    ExtractResponse,
    SuggestMoreResponse,
    TranslateResponse,
    VideoCreateRequest,
    VideoDetailResponse,
)
from jobsync.sandbox.store import SandboxConflict, SandboxStore

router = APIRouter(prefix="/api/v1", tags=["sandbox"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Video not found")


def _conflict(exc: SandboxConflict) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={"error_code": exc.error_code, "error_message": exc.message},
    )


@router.post("/videos", response_model=VideoDetailResponse)
async def create_video(payload: VideoCreateRequest, store: SandboxStore = Depends(provide_store)):
    job = store.create_job(
        title=payload.title,
        description=payload.description,
        video_url=payload.video_url,
        transcript=payload.transcript,
        fail_stage=payload.fail_stage,
    )
    return VideoDetailResponse(**job.to_payload())


@router.get("/videos/{video_id}", response_model=VideoDetailResponse)
async def get_video(video_id: str, store: SandboxStore = Depends(provide_store)):
    job = store.observe(video_id)
    if job is None:
        raise _not_found()
    return VideoDetailResponse(**job.to_payload())


@router.post("/extractions/suggest-more/{video_id}", response_model=SuggestMoreResponse)
async def suggest_more(video_id: str, store: SandboxStore = Depends(provide_store)):
    try:
        batch = store.suggest_more(video_id)
    except SandboxConflict as exc:
        raise _conflict(exc) from exc
    if batch is None:
        raise _not_found()
    job = store.get_job(video_id)
    return SuggestMoreResponse(
        suggested_columns=batch,
        suggestions_remaining=job.suggestions_remaining if job else 0,
    )


@router.post("/extractions/extract/{video_id}", response_model=ExtractResponse)
async def extract(video_id: str, payload: ExtractRequest, store: SandboxStore = Depends(provide_store)):
    columns = [item.strip() for item in payload.selected_columns if item and item.strip()]
    if not columns:
        raise HTTPException(status_code=422, detail="selected_columns must not be empty")
    try:
        job = store.start_extraction(video_id, columns)
    except SandboxConflict as exc:
        raise _conflict(exc) from exc
    if job is None:
        raise _not_found()
    return ExtractResponse(status="queued", selected_columns=columns)


@router.post("/videos/{video_id}/translate", response_model=TranslateResponse)
async def translate(video_id: str, store: SandboxStore = Depends(provide_store)):
    try:
        text = store.translate(video_id)
    except SandboxConflict as exc:
        raise _conflict(exc) from exc
    if text is None:
        raise _not_found()
    return TranslateResponse(translated_text=text)
