"""Local stand-in for the media-processing backend.

Run with ``uvicorn jobsync.sandbox.main:app --port 8000`` and point
``JOBSYNC_API_URL`` at ``http://localhost:8000/api/v1``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobsync.core.config import get_settings
from jobsync.core.logging import configure_logging
from jobsync.sandbox.router import router

settings = get_settings()
configure_logging(settings.log_level or logging.INFO)

app = FastAPI(title="jobsync sandbox backend", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    return {"ok": "true"}
