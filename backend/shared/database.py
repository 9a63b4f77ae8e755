"""
Async Supabase client factory.

Two clients are kept per process:
- the service client (service role key) backs the document store and
  administrative auth calls such as account deletion;
- the auth client (anon key) carries the signed-in user's session.

They are never shared, since signing in on a client rewrites the
authorization header it sends to PostgREST.
"""

from typing import Optional
from supabase import acreate_client, AsyncClient

from .config import get_settings
from .exceptions import ConfigurationError

# Module-level client cache
_service_client: Optional[AsyncClient] = None
_auth_client: Optional[AsyncClient] = None


async def get_supabase_client() -> AsyncClient:
    """
    Get Supabase client with service role (bypasses RLS).

    Returns:
        Supabase client configured with service role key

    Raises:
        ConfigurationError: If SUPABASE_URL or the service role key is missing
    """
    global _service_client

    if _service_client is None:
        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_service_role_key:
            raise ConfigurationError(
                "Supabase configuration missing. "
                "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY environment variables.",
                code="SUPABASE_NOT_CONFIGURED",
            )
        _service_client = await acreate_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )

    return _service_client


async def get_supabase_auth_client() -> AsyncClient:
    """
    Get the Supabase client that holds the process's user session.

    Returns:
        Supabase client configured with the anon key

    Raises:
        ConfigurationError: If SUPABASE_URL or the anon key is missing
    """
    global _auth_client

    if _auth_client is None:
        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_anon_key:
            raise ConfigurationError(
                "Supabase configuration missing. "
                "Set SUPABASE_URL and SUPABASE_ANON_KEY environment variables.",
                code="SUPABASE_NOT_CONFIGURED",
            )
        _auth_client = await acreate_client(
            settings.supabase_url,
            settings.supabase_anon_key,
        )

    return _auth_client


def reset_client_cache() -> None:
    """
    Reset the cached database clients.

    Useful for testing or when configuration changes.
    """
    global _service_client, _auth_client
    _service_client = None
    _auth_client = None
