"""Supabase async client singleton"""
from typing import Optional

from supabase import AsyncClient, acreate_client  # type: ignore

from timersync import config

_supabase_client: Optional[AsyncClient] = None


async def get_supabase_client() -> AsyncClient:
    """
    Get or create the async Supabase client singleton.

    The async client is required for Realtime channels; the same instance
    also serves table reads and writes.
    """
    global _supabase_client

    if _supabase_client is None:
        url = config.SUPABASE_URL
        key = config.SUPABASE_SERVICE_ROLE_KEY

        if not url or not key:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        _supabase_client = await acreate_client(url, key)

    return _supabase_client


def reset_supabase_client():
    """Reset the Supabase client singleton (useful for testing)"""
    global _supabase_client
    _supabase_client = None
