"""
Single-slot credential store for the upstream session cookies.

The credential lives under one fixed key in a durable key/value table
(`core.gateway_kv`). Reads never fail: any storage problem degrades to the
compiled default. Writes are last-writer-wins and surface storage problems
as `ConfigurationError`.
"""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime
from typing import Protocol

from supabase import Client

from nf_metadata.errors import ConfigurationError

logger = logging.getLogger(__name__)

CREDENTIAL_KEY = "netflix_cookies"

# Compiled fallback; production deployments store the real value in the KV table.
DEFAULT_COOKIES = ""


class CredentialBackend(Protocol):
    """Durable key/value binding used by `CredentialStore`."""

    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str) -> None: ...


class InMemoryCredentialBackend:
    """
    In-process key/value backend for local development and tests.

    Not shared across gateway instances.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value


class SupabaseCredentialBackend:
    """Key/value rows in `core.gateway_kv` (key text primary key, value text)."""

    def __init__(self, db: Client, *, schema: str = "core", table: str = "gateway_kv") -> None:
        self._db = db
        self._schema = schema
        self._table = table

    def get(self, key: str) -> str | None:
        response = (
            self._db.schema(self._schema)
            .table(self._table)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if hasattr(response, "error") and response.error:
            raise RuntimeError(f"Supabase error reading {self._schema}.{self._table} key={key}: {response.error}")
        rows = response.data or []
        if not isinstance(rows, list) or not rows:
            return None
        value = rows[0].get("value") if isinstance(rows[0], dict) else None
        return value if isinstance(value, str) else None

    def put(self, key: str, value: str) -> None:
        payload = {
            "key": key,
            "value": value,
            "updated_at": datetime.now(UTC).isoformat(),
        }
        response = self._db.schema(self._schema).table(self._table).upsert(payload, on_conflict="key").execute()
        if hasattr(response, "error") and response.error:
            raise RuntimeError(f"Supabase error upserting {self._schema}.{self._table} key={key}: {response.error}")


class CredentialStore:
    """
    Resolve and rotate the upstream session credential.

    `backend=None` means no durable binding: `resolve()` returns the default and
    `update()` raises `ConfigurationError`.
    """

    def __init__(
        self,
        backend: CredentialBackend | None,
        *,
        key: str = CREDENTIAL_KEY,
        default: str = DEFAULT_COOKIES,
    ) -> None:
        self._backend = backend
        self._key = key
        self._default = default

    @property
    def is_bound(self) -> bool:
        return self._backend is not None

    def resolve(self) -> str:
        if self._backend is None:
            return self._default
        try:
            value = self._backend.get(self._key)
        except Exception as e:  # noqa: BLE001
            logger.warning(f"Credential store not available, using default cookies: {e}")
            return self._default
        if value:
            return value
        return self._default

    def update(self, value: str) -> bool:
        if self._backend is None:
            raise ConfigurationError("KV namespace not configured")
        try:
            self._backend.put(self._key, value)
        except Exception as e:  # noqa: BLE001
            logger.error(f"Failed to write credential to store: {e}")
            raise ConfigurationError("Failed to store cookies") from e
        logger.info(f"Credential {self._key!r} updated ({len(value)} chars)")
        return True
