"""
Metadata Gateway API - FastAPI application.

Provides endpoints for:
- Looking up title metadata from the upstream GraphQL service
- Rotating the upstream session cookies (API key protected)
- Health checks
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.cors import cors_headers, cors_middleware
from api.deps import get_api_key, get_credential_store, get_rate_limiter
from api.routers import cookies, metadata
from nf_metadata.errors import MetadataGatewayError, RateLimitError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    store = get_credential_store()
    logger.info(
        "Starting up Metadata Gateway API "
        f"(credential_store_bound={store.is_bound}, "
        f"api_key_configured={get_api_key() is not None}, "
        f"rate_limit={'on' if get_rate_limiter() else 'off'})"
    )
    yield
    logger.info("Shutting down Metadata Gateway API...")


app = FastAPI(
    title="Metadata Gateway API",
    description="Typed gateway over the upstream title metadata GraphQL service",
    version="0.1.0",
    lifespan=lifespan,
)

app.middleware("http")(cors_middleware)


@app.exception_handler(MetadataGatewayError)
async def gateway_error_handler(request: Request, exc: MetadataGatewayError) -> JSONResponse:
    headers = exc.headers if isinstance(exc, RateLimitError) else None
    return JSONResponse({"error": exc.message}, status_code=exc.status_code, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
    # Unknown paths and methods get an empty 404.
    if exc.status_code in (404, 405):
        return Response(status_code=404)
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        {"error": "Internal server error"},
        status_code=500,
        headers=cors_headers(request.headers.get("Origin")),
    )


app.include_router(metadata.router, prefix="/api")
app.include_router(cookies.router, prefix="/api")


@app.get("/api/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "timestamp": datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")}
