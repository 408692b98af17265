"""
Error taxonomy shared by the gateway and its collaborators.

Every error carries the HTTP status the gateway answers with. The message is
what the caller sees; upstream detail (status, body snippet) is kept on the
exception for logging only.
"""

from __future__ import annotations


class MetadataGatewayError(Exception):
    """Base class for errors rendered as `{"error": message}` responses."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(MetadataGatewayError):
    """Malformed caller input; always client-correctable."""

    status_code = 400


class AuthorizationError(MetadataGatewayError):
    """Absent or incorrect shared secret."""

    status_code = 401


class ConfigurationError(MetadataGatewayError):
    """The deployment is missing a required binding or secret."""

    status_code = 500


class RateLimitError(MetadataGatewayError):
    """The caller exhausted its request window; `headers` carry the budget."""

    status_code = 429

    def __init__(self, message: str, *, headers: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.headers = dict(headers or {})


class UpstreamError(MetadataGatewayError):
    """
    The upstream GraphQL service returned non-success or was unreachable.

    `upstream_status` is the status the upstream answered with (None when the
    request never completed). The gateway always answers 500.
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        upstream_status: int | None = None,
        body_snippet: str | None = None,
    ) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
        self.body_snippet = body_snippet
