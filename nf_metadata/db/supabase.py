from __future__ import annotations

import os

from supabase import Client, create_client


def get_supabase_url() -> str | None:
    url = (os.getenv("SUPABASE_URL") or "").strip()
    return url or None


def get_supabase_service_key() -> str | None:
    key = (os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "").strip()
    return key or None


def is_supabase_configured() -> bool:
    return bool(get_supabase_url() and get_supabase_service_key())


def create_supabase_admin_client(*, url: str | None = None, service_role_key: str | None = None) -> Client:
    """
    Create a Supabase client using the service role key (bypasses RLS).

    The gateway uses this client for the credential key/value table only.
    """

    url = url or get_supabase_url()
    service_role_key = service_role_key or get_supabase_service_key()
    if not url:
        raise RuntimeError("SUPABASE_URL environment variable is not set")
    if not service_role_key:
        raise RuntimeError("SUPABASE_SERVICE_ROLE_KEY environment variable is not set")
    return create_client(url, service_role_key)
