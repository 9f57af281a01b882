"""FastAPI application for the moderation registry portal.

Provides REST API endpoints wrapping the modreg package for:
- Content submission, reporting, and moderator decisions
- Moderator set management
- The event journal and webhook forwarding
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the modreg package is importable by adding the project root to sys.path.
_project_root = str(Path(__file__).resolve().parents[3])
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from modreg import __version__
from modreg.core.config import Settings
from modreg.core.logging import configure_logging
from modreg.registry.errors import (
    Conflict,
    InvalidInput,
    ModerationError,
    NotFound,
    Unauthorized,
)
from web.backend.app.routers import events, moderation

_settings = Settings.from_env()
configure_logging(_settings.log_level, _settings.json_logs)

app = FastAPI(
    title="modreg API",
    description=(
        "REST API for the community moderation registry. "
        "Provides endpoints for content submission, reporting, moderator "
        "decisions, moderator management, and the event journal."
    ),
    version=__version__,
)

# ---------------------------------------------------------------------------
# CORS middleware (allow all origins for development)
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Registry errors -> HTTP
# ---------------------------------------------------------------------------

_ERROR_STATUS = {
    NotFound: status.HTTP_404_NOT_FOUND,
    InvalidInput: status.HTTP_422_UNPROCESSABLE_ENTITY,
    Unauthorized: status.HTTP_403_FORBIDDEN,
    Conflict: status.HTTP_409_CONFLICT,
}


@app.exception_handler(ModerationError)
async def moderation_error_handler(request: Request, exc: ModerationError):
    return JSONResponse(
        status_code=_ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST),
        content={"detail": exc.message, "kind": exc.kind},
    )


# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------
app.include_router(moderation.router)
app.include_router(events.router)


# ---------------------------------------------------------------------------
# Root and health-check endpoints
# ---------------------------------------------------------------------------


@app.get("/", tags=["meta"])
async def root():
    """Return basic API information."""
    return {
        "name": "modreg API",
        "version": __version__,
        "description": "Community moderation registry REST API",
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


@app.get("/health", tags=["meta"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
