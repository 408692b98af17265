"""
Permissive CORS headers on every gateway response, plus preflight handling.

Set CORS_ALLOW_ORIGINS as a comma-separated list of origins to restrict the
allowed origin; otherwise any origin is allowed.
"""

from __future__ import annotations

import os
from collections.abc import Awaitable, Callable

from fastapi import Request, Response

ALLOW_METHODS = "GET, POST, OPTIONS"
ALLOW_HEADERS = "Content-Type, X-API-Key"
EXPOSE_HEADERS = "X-RateLimit-Remaining, X-RateLimit-Limit"


def get_cors_origins() -> list[str]:
    """
    Get CORS allowed origins from environment.
    Example: CORS_ALLOW_ORIGINS=https://metadata.example.com,http://localhost:5173
    """
    origins_str = os.getenv("CORS_ALLOW_ORIGINS", "")
    if not origins_str:
        return []
    return [origin.strip() for origin in origins_str.split(",") if origin.strip()]


def cors_headers(origin: str | None = None) -> dict[str, str]:
    origins = get_cors_origins()
    headers = {
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
        "Access-Control-Expose-Headers": EXPOSE_HEADERS,
    }
    if not origins:
        headers["Access-Control-Allow-Origin"] = "*"
    else:
        headers["Access-Control-Allow-Origin"] = origin if origin in origins else origins[0]
        headers["Vary"] = "Origin"
    return headers


async def cors_middleware(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Answer preflight requests directly and attach CORS headers to everything else."""
    origin = request.headers.get("Origin")
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=cors_headers(origin))

    response = await call_next(request)
    for key, value in cors_headers(origin).items():
        response.headers[key] = value
    return response
