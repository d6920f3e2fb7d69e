"""Short-lived read cache for raw store rows.

Only rows are memoised, never derived data such as badges. Writers call the
``invalidate_*`` helpers so the next read goes back to the store.
"""
from __future__ import annotations

import os
import time
from typing import Any, Awaitable, Callable, Optional

_DEFAULT_TTL = int(os.getenv("READ_CACHE_SECONDS", "60"))
_DISABLED = os.getenv("READ_CACHE_DISABLED", "false").lower() == "true"

ENTRIES_ALL = "entries:all"
PROFILES_LIST = "profiles:list"

_STORE: dict[str, tuple[Any, float]] = {}


def entries_key(user_id: str) -> str:
    return f"entries:user:{user_id}"


def profile_key(user_id: str) -> str:
    return f"profiles:uid:{user_id}"


def roles_key(user_id: str) -> str:
    return f"roles:uid:{user_id}"


def get(key: str) -> Any | None:
    if _DISABLED:
        return None
    item = _STORE.get(key)
    if item is None:
        return None
    value, expires_at = item
    if time.monotonic() < expires_at:
        return value
    _STORE.pop(key, None)
    return None


def set(key: str, value: Any, ttl: Optional[int] = None) -> None:
    if _DISABLED:
        return
    ttl_s = _DEFAULT_TTL if ttl is None else int(ttl)
    _STORE[key] = (value, time.monotonic() + max(1, ttl_s))


async def fetch(key: str, loader: Callable[[], Awaitable[Any]], cache_none: bool = True) -> Any:
    """Return the cached value for ``key`` or await ``loader`` and remember it."""
    hit = get(key)
    if hit is not None:
        return hit
    value = await loader()
    if value is not None or cache_none:
        set(key, value)
    return value


def clear(prefix: Optional[str] = None) -> None:
    if prefix is None:
        _STORE.clear()
        return
    for k in [k for k in _STORE if k.startswith(prefix)]:
        _STORE.pop(k, None)


def invalidate_entries(user_id: str) -> None:
    """Drop cached entry reads for one owner and every aggregate built from them."""
    clear(entries_key(user_id))
    clear(ENTRIES_ALL)


def invalidate_user(user_id: str) -> None:
    """Forget everything memoised for one user (sign-out, password reset)."""
    invalidate_entries(user_id)
    clear(profile_key(user_id))
    clear(roles_key(user_id))
    clear(PROFILES_LIST)
