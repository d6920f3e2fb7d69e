import asyncio
import logging
import time
from typing import Any, Awaitable, Iterable, Optional

from app.core.config import get_settings

logger = logging.getLogger("supabase.query")


async def timed_query(awaitable: Awaitable[Any], op: str, timeout: Optional[float] = None) -> Any:
    """Await a PostgREST call with a hard timeout; log slow calls."""
    limit = timeout if timeout is not None else get_settings().query_timeout
    t0 = time.perf_counter()
    try:
        resp = await asyncio.wait_for(awaitable, timeout=limit)
    except asyncio.TimeoutError:
        raise RuntimeError(f"Supabase {op} timed out after {limit}s")
    ms = int((time.perf_counter() - t0) * 1000)
    if ms > 50:
        logger.info("supabase_%s_ms=%d", op, ms)
    return resp


def rows(resp: Any) -> list[dict]:
    data = getattr(resp, "data", None)
    if not data:
        return []
    return data if isinstance(data, list) else [data]


def first_row(resp: Any) -> Optional[dict]:
    found = rows(resp)
    return found[0] if found else None


def matches_search(search: Optional[str], *fields: Optional[str]) -> bool:
    """Case-insensitive substring match against any of the given fields."""
    if not search:
        return True
    needle = search.strip().lower()
    return any(needle in (f or "").lower() for f in fields)


def dedupe(values: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for v in values:
        if v and v not in seen:
            seen[v] = None
    return list(seen)
