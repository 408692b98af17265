"""
Title metadata lookup endpoint.
"""
from __future__ import annotations

import logging
import re

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from api.deps import CredentialStoreDep, MetadataClientDep, RateLimiterDep, TrustForwardedFor
from nf_metadata.errors import RateLimitError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["metadata"])

_VIDEO_ID_RE = re.compile(r"[0-9]+")


def validate_video_id(video_id: str | None) -> str:
    if not video_id:
        raise ValidationError("videoId parameter is required")
    if not _VIDEO_ID_RE.fullmatch(video_id):
        raise ValidationError("videoId must be a numeric value")
    return video_id


def _client_key(request: Request, trust_forwarded_for: bool) -> str:
    # The header is caller-controlled unless a proxy in front of us sets it.
    if trust_forwarded_for:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@router.get("/metadata")
def get_metadata(
    request: Request,
    store: CredentialStoreDep,
    client: MetadataClientDep,
    limiter: RateLimiterDep,
    trust_forwarded_for: TrustForwardedFor,
    video_id: str | None = Query(default=None, alias="videoId"),
) -> JSONResponse:
    """Return the raw upstream `MiniModalQuery` envelope for one title id."""
    video_id = validate_video_id(video_id)

    budget_headers: dict[str, str] = {}
    if limiter is not None:
        result = limiter.hit(_client_key(request, trust_forwarded_for))
        budget_headers = result.headers()
        if not result.allowed:
            raise RateLimitError("Rate limit exceeded", headers=budget_headers)

    try:
        payload = client.fetch_metadata(video_id, store.resolve())
    except UpstreamError as exc:
        # Don't leak upstream details to the caller
        logger.error(
            f"Error fetching Netflix metadata for videoId={video_id}: {exc} "
            f"(status={exc.upstream_status}, body={exc.body_snippet!r})"
        )
        return JSONResponse(
            {"error": "Failed to fetch metadata from Netflix"},
            status_code=500,
            headers=budget_headers,
        )

    return JSONResponse(payload, headers=budget_headers)
