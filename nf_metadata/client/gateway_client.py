"""
HTTP client for the gateway's lookup endpoint, used by the orchestrator.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

import requests

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY_URL = "http://127.0.0.1:8000"


class GatewayRequestError(RuntimeError):
    """The gateway could not be reached or answered with a non-JSON body."""


@dataclass(frozen=True)
class GatewayResponse:
    status_code: int
    payload: Mapping[str, Any]
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def error_message(self) -> str | None:
        error = self.payload.get("error")
        return error if isinstance(error, str) and error else None


def _decode(resp: requests.Response) -> GatewayResponse:
    try:
        payload = resp.json()
    except ValueError as exc:
        raise GatewayRequestError(f"Gateway returned a non-JSON response (HTTP {resp.status_code})") from exc
    return GatewayResponse(
        status_code=resp.status_code,
        payload=payload if isinstance(payload, Mapping) else {},
        headers=dict(resp.headers),
    )


class MetadataGateway(Protocol):
    def lookup(self, video_id: str) -> GatewayResponse: ...


class HttpGatewayClient:
    def __init__(
        self,
        base_url: str = DEFAULT_GATEWAY_URL,
        *,
        session: requests.Session | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds

    def lookup(self, video_id: str) -> GatewayResponse:
        try:
            resp = self._session.get(
                f"{self._base_url}/api/metadata",
                params={"videoId": video_id},
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.debug(f"Gateway request for {video_id} failed: {exc}")
            raise GatewayRequestError(f"Network error: {exc}") from exc

        return _decode(resp)

    def update_cookies(self, cookies: str, *, api_key: str) -> GatewayResponse:
        try:
            resp = self._session.post(
                f"{self._base_url}/api/cookies",
                json={"cookies": cookies},
                headers={"X-API-Key": api_key},
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            raise GatewayRequestError(f"Network error: {exc}") from exc
        return _decode(resp)
