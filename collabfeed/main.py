"""Application entry point for the FastAPI backend."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .database import init_db
from .routers import collaboration_router, engagement_router, feed_router, media_router, posts_router
from .services import PostEngineError

logger = logging.getLogger(__name__)

settings = get_settings()
APP_NAME = settings.app_name
API_VERSION = settings.api_version

logging.basicConfig(level=settings.log_level.upper())

# Domain error code -> HTTP status.
ERROR_STATUS = {
    "not_signed_in": 401,
    "validation_error": 422,
    "not_authorized": 403,
    "not_found": 404,
    "not_allowed": 409,
    "already_invited": 409,
    "already_co_creator": 409,
    "storage_failure": 502,
}

app = FastAPI(title=APP_NAME, version=API_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(posts_router)
app.include_router(feed_router)
app.include_router(engagement_router)
app.include_router(collaboration_router)
app.include_router(media_router)


@app.exception_handler(PostEngineError)
async def _post_engine_error_handler(request: Request, exc: PostEngineError) -> JSONResponse:
    status_code = ERROR_STATUS.get(exc.code, 400)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content={"error": exc.code, "detail": exc.message})


@app.on_event("startup")
async def _startup() -> None:
    """Ensure the database schema exists before serving."""

    try:
        init_db()
    except Exception:  # pragma: no cover - best effort logging
        logger.exception("Database initialisation failed")
        raise
    logger.info("%s %s ready", APP_NAME, API_VERSION)


@app.get("/api", tags=["system"])
def api_info() -> dict[str, str]:
    return {"service": APP_NAME, "version": API_VERSION}


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
