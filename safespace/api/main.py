"""
safespace.api.main — FastAPI application entry point
=====================================================

Run with::

    uvicorn safespace.api.main:app --reload --port 8000

or ``python -m safespace.api`` to pick the port up from ``config.yaml``.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from safespace.api.deps import get_engine  # noqa: E402
from safespace.api.routes.activities import router as activities_router  # noqa: E402
from safespace.api.routes.announcements import router as announcements_router  # noqa: E402
from safespace.api.routes.assessments import router as assessments_router  # noqa: E402
from safespace.api.routes.moods import router as moods_router  # noqa: E402
from safespace.api.routes.notifications import router as notifications_router  # noqa: E402
from safespace.api.routes.organizations import router as organizations_router  # noqa: E402
from safespace.api.routes.presence import router as presence_router  # noqa: E402
from safespace.api.routes.support import router as support_router  # noqa: E402
from safespace.errors import SafeSpaceError  # noqa: E402

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env with safe defaults.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — warm the DB engine."""
    engine = get_engine()
    logger.info("SafeSpace API started — engine ready (%s)", engine.url.database)
    yield
    logger.info("SafeSpace API shutting down")


app = FastAPI(
    title="SafeSpace Engagement API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SafeSpaceError)
async def safespace_error_handler(request: Request, exc: SafeSpaceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(presence_router, prefix="/api")
app.include_router(activities_router, prefix="/api")
app.include_router(notifications_router, prefix="/api")
app.include_router(announcements_router, prefix="/api")
app.include_router(assessments_router, prefix="/api")
app.include_router(moods_router, prefix="/api")
app.include_router(support_router, prefix="/api")
app.include_router(organizations_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
