# src/flightdeck/main.py
"""Main entry point for the Flying With Joel site API."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import FastAPI, Request, Response, status
from fastapi.datastructures import Headers
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from flightdeck.api.dependencies import close_store
from flightdeck.api.endpoints import (
    admin_notes_router,
    data_requests_router,
    followers_router,
    incident_notice_router,
    live_status_router,
    schedule_router,
    site_mode_router,
    suggestions_router,
)
from flightdeck.core.errors import SiteError
from flightdeck.core.settings import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


class PreflightCORSMiddleware(CORSMiddleware):
    """CORS middleware answering accepted preflights with an empty 204."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != status.HTTP_200_OK:
            return response
        headers = {
            key: value
            for key, value in response.headers.items()
            if key not in ("content-length", "content-type")
        }
        return Response(status_code=status.HTTP_204_NO_CONTENT, headers=headers)


# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Backend for the Flying With Joel website",
    version=settings.app_version,
)


@app.middleware("http")
async def no_store_cache_control(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    response = await call_next(request)
    response.headers.setdefault("Cache-Control", "no-store")
    return response


# Added last so it also wraps preflights and error responses
app.add_middleware(
    PreflightCORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


@app.exception_handler(SiteError)
async def site_error_handler(request: Request, exc: SiteError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(exc.to_body(), status_code=exc.status_code, headers=exc.headers or None)


def _describe_validation_error(errors: list[dict[str, Any]]) -> str:
    if not errors:
        return "Invalid request."
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Invalid JSON."
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query")]
    field = ".".join(location) or "body"
    return f"{field}: {first.get('msg', 'invalid value')}"


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        {"error": _describe_validation_error(list(exc.errors()))},
        status_code=status.HTTP_400_BAD_REQUEST,
    )


# Include API routers
app.include_router(incident_notice_router, prefix="/api")
app.include_router(data_requests_router, prefix="/api")
app.include_router(site_mode_router, prefix="/api")
app.include_router(schedule_router, prefix="/api")
app.include_router(admin_notes_router, prefix="/api")
app.include_router(suggestions_router, prefix="/api")
app.include_router(live_status_router, prefix="/api")
app.include_router(followers_router, prefix="/api")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await close_store()


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
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("flightdeck.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
