from __future__ import annotations

import pytest
import requests

from nf_metadata.client.analytics import AnalyticsTracker
from nf_metadata.client.gateway_client import GatewayRequestError, HttpGatewayClient
from nf_metadata.client.history import HistoryTracker
from nf_metadata.client.orchestrator import SearchOrchestrator, SearchStatus
from nf_metadata.client.rate_budget import RateBudget
from nf_metadata.client.state_store import JsonStateStore


class _FakeResponse:
    def __init__(self, status_code: int, *, payload=None, headers: dict | None = None) -> None:  # noqa: ANN001
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}

    def json(self):  # noqa: ANN201
        if self._payload is None:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    def _answer(self, method: str, url: str, kwargs: dict):  # noqa: ANN202
        self.calls.append({"method": method, "url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response

    def get(self, url: str, **kwargs):  # noqa: ANN003, ANN201
        return self._answer("GET", url, kwargs)

    def post(self, url: str, **kwargs):  # noqa: ANN003, ANN201
        return self._answer("POST", url, kwargs)


def _found_payload(video_id: int) -> dict:
    return {"data": {"unifiedEntities": [{"videoId": video_id, "title": f"Title {video_id}"}]}}


def test_lookup_gets_metadata_endpoint_with_video_id_param() -> None:
    session = _FakeSession(
        _FakeResponse(200, payload=_found_payload(81), headers={"X-RateLimit-Remaining": "3"})
    )
    client = HttpGatewayClient("http://gateway.local:8000/", session=session, timeout_seconds=4.0)

    response = client.lookup("81")

    assert session.calls == [
        {
            "method": "GET",
            "url": "http://gateway.local:8000/api/metadata",
            "params": {"videoId": "81"},
            "timeout": 4.0,
        }
    ]
    assert response.ok is True
    assert response.payload == _found_payload(81)
    assert response.headers == {"X-RateLimit-Remaining": "3"}


def test_lookup_error_payload_exposes_message() -> None:
    session = _FakeSession(_FakeResponse(400, payload={"error": "videoId must be a numeric value"}))

    response = HttpGatewayClient(session=session).lookup("abc")

    assert response.ok is False
    assert response.error_message == "videoId must be a numeric value"


def test_empty_404_body_raises_gateway_request_error() -> None:
    session = _FakeSession(_FakeResponse(404, payload=None))

    with pytest.raises(GatewayRequestError, match="HTTP 404"):
        HttpGatewayClient(session=session).lookup("1")


def test_non_object_json_becomes_empty_payload() -> None:
    response = HttpGatewayClient(session=_FakeSession(_FakeResponse(200, payload=["x"]))).lookup("1")
    assert response.payload == {}


def test_network_failure_raises_gateway_request_error() -> None:
    session = _FakeSession(error=requests.ConnectionError("connection refused"))

    with pytest.raises(GatewayRequestError, match="Network error"):
        HttpGatewayClient(session=session).lookup("1")


def test_update_cookies_posts_body_and_api_key() -> None:
    session = _FakeSession(_FakeResponse(200, payload={"success": True, "message": "Cookies updated successfully"}))

    response = HttpGatewayClient("http://gateway.local", session=session).update_cookies(
        "NetflixId=abc", api_key="secret"
    )

    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "http://gateway.local/api/cookies"
    assert call["json"] == {"cookies": "NetflixId=abc"}
    assert call["headers"] == {"X-API-Key": "secret"}
    assert response.ok is True


def test_orchestrator_reads_budget_headers_through_http_client(tmp_path) -> None:
    session = _FakeSession(
        _FakeResponse(
            200,
            payload=_found_payload(81),
            headers={"X-RateLimit-Remaining": "12", "X-RateLimit-Limit": "60"},
        )
    )
    store = JsonStateStore(tmp_path)
    orch = SearchOrchestrator(
        HttpGatewayClient(session=session),
        history=HistoryTracker(store),
        analytics=AnalyticsTracker(store),
    )

    assert orch.search("81").status is SearchStatus.SUCCESS
    assert orch.rate_budget.budget == RateBudget(remaining=12, limit=60)


def test_orchestrator_reports_unreachable_route_as_error(tmp_path) -> None:
    store = JsonStateStore(tmp_path)
    orch = SearchOrchestrator(
        HttpGatewayClient(session=_FakeSession(_FakeResponse(404, payload=None))),
        history=HistoryTracker(store),
        analytics=AnalyticsTracker(store),
    )

    state = orch.search("81")

    assert state.status is SearchStatus.ERROR
    assert "HTTP 404" in (state.error or "")
