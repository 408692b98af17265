"""
Dependency injection for the credential store, upstream client and gateway secrets.
"""
from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from api.rate_limit import FixedWindowRateLimiter
from nf_metadata.db.supabase import create_supabase_admin_client, is_supabase_configured
from nf_metadata.integrations.netflix.graphql_client import HttpNetflixGraphqlClient, NetflixMetadataClient
from nf_metadata.repositories.credentials import (
    CredentialBackend,
    CredentialStore,
    InMemoryCredentialBackend,
    SupabaseCredentialBackend,
)
from nf_metadata.utils.env import load_env

load_env()

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={raw!r}")
        return default


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}")
        return default


def get_api_key() -> str | None:
    """Shared secret for the credential update endpoint; None when not configured."""
    key = (os.getenv("API_KEY") or "").strip()
    return key or None


def get_trust_forwarded_for() -> bool:
    """Whether `X-Forwarded-For` names the client; only safe behind a trusted proxy."""
    return (os.getenv("TRUST_FORWARDED_FOR") or "").strip().lower() in ("1", "true", "yes")


def _create_credential_backend() -> CredentialBackend | None:
    backend = (os.getenv("NF_METADATA_KV_BACKEND") or "").strip().lower()
    if backend == "memory":
        logger.info("Using in-memory credential store (local dev mode)")
        return InMemoryCredentialBackend()
    if not is_supabase_configured():
        logger.info("No credential store configured; using default cookies")
        return None
    try:
        return SupabaseCredentialBackend(create_supabase_admin_client())
    except Exception as e:
        logger.error(f"Failed to create Supabase credential store: {e}")
        return None


@lru_cache
def get_credential_store() -> CredentialStore:
    return CredentialStore(_create_credential_backend())


@lru_cache
def get_metadata_client() -> NetflixMetadataClient:
    return HttpNetflixGraphqlClient(timeout_seconds=_env_float("NETFLIX_GRAPHQL_TIMEOUT_SECONDS", 30.0))


@lru_cache
def get_rate_limiter() -> FixedWindowRateLimiter | None:
    """Lookup budget per client; disabled unless RATE_LIMIT_PER_MINUTE > 0."""
    limit = _env_int("RATE_LIMIT_PER_MINUTE", 0)
    if limit <= 0:
        return None
    return FixedWindowRateLimiter(limit=limit, window_seconds=60.0)


# Type aliases for dependency injection
ConfiguredApiKey = Annotated[str | None, Depends(get_api_key)]
CredentialStoreDep = Annotated[CredentialStore, Depends(get_credential_store)]
MetadataClientDep = Annotated[NetflixMetadataClient, Depends(get_metadata_client)]
RateLimiterDep = Annotated[FixedWindowRateLimiter | None, Depends(get_rate_limiter)]
TrustForwardedFor = Annotated[bool, Depends(get_trust_forwarded_for)]
