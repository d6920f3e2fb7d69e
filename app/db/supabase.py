"""Unified async Supabase clients.

Import using: from app.db.supabase import get_supabase, get_supabase_admin

``get_supabase`` uses the anon key and only validates caller tokens
(``auth.get_user``). ``get_supabase_admin`` uses the service-role key, which
bypasses row-level rules; every table read and write goes through it, so the
services and role dependencies are the authorization layer.
"""
from __future__ import annotations

import asyncio
from typing import Optional
from supabase import AsyncClient, create_async_client
from app.core.config import get_settings

_client: Optional[AsyncClient] = None
_admin_client: Optional[AsyncClient] = None
_lock = asyncio.Lock()


async def get_supabase() -> AsyncClient:
    """Return a cached anon-key `AsyncClient` (lazy-created)."""
    global _client
    if _client is not None:
        return _client
    async with _lock:
        if _client is None:
            settings = get_settings()
            try:
                _client = await create_async_client(settings.supabase_url, settings.supabase_key)
            except Exception as exc:  # pragma: no cover (network/init failure)
                raise RuntimeError("Could not create Supabase async client") from exc
    return _client


async def get_supabase_admin() -> AsyncClient:
    """Return a cached service-role `AsyncClient`."""
    global _admin_client
    if _admin_client is not None:
        return _admin_client
    settings = get_settings()
    if not settings.supabase_service_role_key:
        raise RuntimeError("SUPABASE_SERVICE_ROLE_KEY not configured")
    async with _lock:
        if _admin_client is None:
            try:
                _admin_client = await create_async_client(
                    settings.supabase_url, settings.supabase_service_role_key
                )
            except Exception as exc:  # pragma: no cover (network/init failure)
                raise RuntimeError("Could not create Supabase admin client") from exc
    return _admin_client

__all__ = ["get_supabase", "get_supabase_admin"]
