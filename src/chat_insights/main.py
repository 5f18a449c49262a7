# src/chat_insights/main.py
"""Main entry point for the Chat Insights application."""

from __future__ import annotations

import logging
import math

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from chat_insights.api.v1 import contacts_router, conversations_router, dashboard_router
from chat_insights.core.clock import LocalClock
from chat_insights.core.errors import (
    ChatInsightsError,
    CollaboratorError,
    SessionNotFoundError,
    ThrottledError,
)
from chat_insights.core.settings import settings
from chat_insights.services.rate_limit import SlidingWindowRateLimiter

logging.basicConfig(
    level=settings.log_level.upper(),
    format="[%(levelname)5s][%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Chat Insights API",
    description="Conversation reconstruction and chat volume analytics",
    version=settings.app_version,
)

# Shared components, constructed once and injected through dependencies
app.state.rate_limiter = SlidingWindowRateLimiter(
    settings.rate_limit_max_requests,
    settings.rate_limit_window_seconds,
    sweep_interval_seconds=settings.effective_sweep_interval,
)
app.state.clock = LocalClock(
    settings.timezone_utc_offset_minutes,
    settings.timezone_name,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(conversations_router, prefix="/api/v1")
app.include_router(dashboard_router, prefix="/api/v1")
app.include_router(contacts_router, prefix="/api/v1")


def _error_body(exc: ChatInsightsError) -> dict[str, str]:
    return {"detail": str(exc), "code": exc.__class__.__name__}


@app.exception_handler(ThrottledError)
async def throttled_exception_handler(request: Request, exc: ThrottledError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=_error_body(exc),
        headers={"Retry-After": str(max(1, math.ceil(exc.retry_after)))},
    )


@app.exception_handler(SessionNotFoundError)
async def session_not_found_handler(request: Request, exc: SessionNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=_error_body(exc))


@app.exception_handler(CollaboratorError)
async def collaborator_exception_handler(request: Request, exc: CollaboratorError) -> JSONResponse:
    logger.error("Row store failure on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=_error_body(exc))


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "timezone": settings.timezone_name,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("chat_insights.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
