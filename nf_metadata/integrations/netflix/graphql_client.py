"""
Netflix web GraphQL client.

Implements the persisted-query operation `MiniModalQuery` against
`https://web.prod.cloud.netflix.com/graphql` for a single title id. The query
selection is fixed server-side; the only caller-controlled value is the title
id substituted into `unifiedEntityIds` as `Video:<id>`.

Automated tests for this module should never call the live Netflix endpoint.
Use a fake session and validate the request body directly.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Protocol

import requests

from nf_metadata.errors import UpstreamError

NETFLIX_GRAPHQL_URL = "https://web.prod.cloud.netflix.com/graphql"

NETFLIX_GRAPHQL_OPERATION_MINI_MODAL = "MiniModalQuery"
NETFLIX_GRAPHQL_MINI_MODAL_QUERY_ID = "96c87721-2e20-416f-aa6f-87c8a889c955"
NETFLIX_GRAPHQL_MINI_MODAL_QUERY_VERSION = 102


@dataclass(frozen=True)
class PersistedQueryDescriptor:
    """Operation name, persisted query id/version and the variables template."""

    operation_name: str
    query_id: str
    version: int
    variables_template: Mapping[str, Any]

    def build_body(self, video_id: str) -> dict[str, Any]:
        variables = copy.deepcopy(dict(self.variables_template))
        variables["unifiedEntityIds"] = [f"Video:{video_id}"]
        return {
            "operationName": self.operation_name,
            "variables": variables,
            "extensions": {
                "persistedQuery": {"id": self.query_id, "version": self.version},
            },
        }


MINI_MODAL_QUERY = PersistedQueryDescriptor(
    operation_name=NETFLIX_GRAPHQL_OPERATION_MINI_MODAL,
    query_id=NETFLIX_GRAPHQL_MINI_MODAL_QUERY_ID,
    version=NETFLIX_GRAPHQL_MINI_MODAL_QUERY_VERSION,
    variables_template=MappingProxyType(
        {
            "opaqueImageFormat": "WEBP",
            "transparentImageFormat": "WEBP",
            "videoMerchEnabled": True,
            "fetchPromoVideoOverride": False,
            "hasPromoVideoOverride": False,
            "promoVideoId": 0,
            "videoMerchContext": "BROWSE",
            "isLiveEpisodic": False,
            "artworkContext": {
                "groupLoc": "eyJrLnR5cGUiOiJ3aW5kb3dlZGNvbWluZ3Nvb24iLCJrLnRpbWVXaW5kb3ciOiJuZXh0d2VlayJ9",
            },
            "textEvidenceUiContext": "BOB",
        }
    ),
)


class NetflixMetadataClient(Protocol):
    """
    Port used by the gateway to retrieve raw title metadata.

    Implementations must not retry; a single failure is surfaced immediately.
    """

    def fetch_metadata(self, video_id: str, cookies: str) -> dict[str, Any]: ...


def _body_snippet(text: str | None) -> str:
    return (text or "")[:200].replace("\n", " ").strip()


class HttpNetflixGraphqlClient:
    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        base_url: str = NETFLIX_GRAPHQL_URL,
        query: PersistedQueryDescriptor = MINI_MODAL_QUERY,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._session = session or requests.Session()
        self._base_url = base_url
        self._query = query
        self._timeout_seconds = timeout_seconds

    def fetch_metadata(self, video_id: str, cookies: str) -> dict[str, Any]:
        headers = {
            "content-type": "application/json",
            "Cookie": cookies,
        }

        try:
            resp = self._session.post(
                self._base_url,
                json=self._query.build_body(video_id),
                headers=headers,
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            raise UpstreamError(f"Netflix API request failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            raise UpstreamError(
                f"Netflix API error: {resp.status_code}",
                upstream_status=resp.status_code,
                body_snippet=_body_snippet(resp.text),
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise UpstreamError(
                "Netflix API response was not valid JSON.",
                upstream_status=resp.status_code,
                body_snippet=_body_snippet(resp.text),
            ) from exc

        if not isinstance(payload, dict):
            raise UpstreamError("Netflix API response was not a JSON object.", upstream_status=resp.status_code)
        return payload
