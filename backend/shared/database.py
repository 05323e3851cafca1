"""
Supabase client for the user store.

The users table holds password hashes, salts and refresh tokens, so the
store talks to it with the service-role key. The client is built once per
process from settings. Its HTTP timeout matches store_timeout_seconds, so
a query abandoned by call_with_timeout does not keep its worker thread
busy much longer than the caller waited.
"""

from functools import lru_cache

from supabase import Client, ClientOptions, create_client

from .config import get_settings


@lru_cache
def get_supabase_client() -> Client:
    """
    Return the user store's Supabase client.

    Raises:
        RuntimeError: If the URL or service-role key is not configured
    """
    settings = get_settings()
    missing = [
        name
        for name, value in (
            ("TURNSTILE_SUPABASE_URL", settings.supabase_url),
            ("TURNSTILE_SUPABASE_SERVICE_ROLE_KEY", settings.supabase_service_role_key),
        )
        if not value
    ]
    if missing:
        raise RuntimeError(
            f"Supabase user store selected but {', '.join(missing)} is not set."
        )

    options = ClientOptions(postgrest_client_timeout=settings.store_timeout_seconds)
    return create_client(settings.supabase_url, settings.supabase_service_role_key, options)


def reset_client_cache() -> None:
    """Drop the cached client so the next call rebuilds it from settings."""
    get_supabase_client.cache_clear()
