"""
StudyBuddy Backend API
FastAPI application for AI study assistance with file attachments.
"""

import logging
import os
from typing import List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from studybuddy.routers import gemini, study_help
from studybuddy.gemini import GEMINI_MODEL, gemini_client

# Configure logging to output to console
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="StudyBuddy API",
    description="AI study help with assignment attachments and Google Drive files",
    version="0.1.0",
)


def get_cors_origins() -> List[str]:
    """
    Build the list of allowed CORS origins.

    Always includes http://localhost:3000 (Next.js dev server). Additional
    origins come from the CORS_ORIGINS environment variable as a
    comma-separated list, e.g.:
        CORS_ORIGINS=https://studybuddy.vercel.app,https://preview.studybuddy.app

    Duplicates are removed while preserving order.
    """
    always_included = ["http://localhost:3000"]

    extra_origins: List[str] = []
    cors_env = os.getenv("CORS_ORIGINS", "").strip()
    if cors_env:
        extra_origins = [o.strip() for o in cors_env.split(",") if o.strip()]

    seen: set = set()
    origins: List[str] = []
    for origin in always_included + extra_origins:
        if origin not in seen:
            seen.add(origin)
            origins.append(origin)

    return origins


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(gemini.router, prefix="/api/gemini", tags=["gemini"])
app.include_router(study_help.router, prefix="/api/ai-study-help", tags=["study-help"])


@app.on_event("startup")
async def log_startup() -> None:
    host_port = os.getenv("HOST_PORT", "8000")
    logger.info(
        "StudyBuddy API running at http://localhost:%s (model: %s, gemini: %s)",
        host_port,
        GEMINI_MODEL,
        "configured" if gemini_client is not None else "NOT CONFIGURED",
    )


@app.get("/")
async def root():
    return {"message": "StudyBuddy API", "version": "0.1.0"}


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/health/gemini")
async def health_gemini():
    """
    Report whether the Gemini client is configured.

    Does not call the API.
    Returns 503 when GEMINI_API_KEY is missing.
    """
    if gemini_client is None:
        raise HTTPException(
            status_code=503,
            detail="Gemini client unavailable: GEMINI_API_KEY is not configured",
        )
    return {"status": "ok", "gemini": "configured", "model": GEMINI_MODEL}
