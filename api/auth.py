"""
Shared-secret check for the credential update endpoint.

Fails closed: a deployment without `API_KEY` rejects every update with a
configuration error instead of treating the endpoint as unauthenticated.
"""

from __future__ import annotations

import hmac

from fastapi import Request

from api.deps import ConfiguredApiKey
from nf_metadata.errors import AuthorizationError, ConfigurationError

API_KEY_HEADER = "X-API-Key"


def require_api_key(request: Request, expected_key: ConfiguredApiKey) -> None:
    """
    Dependency that requires `X-API-Key` to match the configured key exactly.

    Raises ConfigurationError (500) when no key is configured and
    AuthorizationError (401) when the header is absent or different.
    """
    if not expected_key:
        raise ConfigurationError("API key not configured on server")

    supplied = request.headers.get(API_KEY_HEADER)
    if not supplied or not hmac.compare_digest(supplied.encode("utf-8"), expected_key.encode("utf-8")):
        raise AuthorizationError("Unauthorized: Invalid or missing API key")
