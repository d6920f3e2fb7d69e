"""Shared FastAPI dependencies for authentication, authorization, and context."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from app.core.config import get_settings
from app.db.supabase import get_supabase
from app.features.profiles.service import get_profile_and_role
from app.auth.service import ACCESS_COOKIE_NAME


logger = logging.getLogger("auth.deps")
security = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    """Identity resolved once per request and passed explicitly to handlers."""
    id: str
    email: str
    role: str = "student"
    name: str = ""
    register_number: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role.lower() == "admin"


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(ACCESS_COOKIE_NAME)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    """Resolve and return the current authenticated user.

    Steps:
      1. Take the bearer token (or the access-token cookie)
      2. Validate it via Supabase Auth
      3. Load profile + role rows in parallel
      4. Cache the identity on ``request.state`` for later dependencies
    """
    cached: CurrentUser | None = getattr(request.state, "current_user", None)
    if cached is not None:
        return cached

    token = _extract_token(request, credentials)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")

    client = await get_supabase()
    try:
        t0 = time.perf_counter()
        auth_user = await asyncio.wait_for(client.auth.get_user(token), timeout=get_settings().query_timeout)
        ms = int((time.perf_counter() - t0) * 1000)
        if ms > 50:
            logger.info("auth.get_user_ms=%d", ms)
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authentication credentials") from exc

    if not auth_user or not auth_user.user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authentication credentials")

    sup_user = auth_user.user
    meta = sup_user.user_metadata or {}
    profile, role = await get_profile_and_role(str(sup_user.id))

    current = CurrentUser(
        id=str(sup_user.id),
        email=sup_user.email or "",
        role=role.value,
        name=(profile.name if profile else None) or meta.get("name") or "",
        register_number=(profile.register_number if profile else None) or meta.get("register_number") or "",
    )
    request.state.current_user = current

    request_id = request.headers.get("X-Request-Id") or request.headers.get("X-Request-ID")
    logger.info(
        "auth_resolved user_id=%s role=%s request_id=%s path=%s",
        current.id,
        current.role,
        request_id,
        request.url.path,
    )
    return current


def require_role(*roles: str) -> Callable:
    """Factory returning dependency enforcing that user has one of the roles.

    Empty roles -> any authenticated user. Admins always pass.
    """
    normalized = {r.lower() for r in roles if r}

    async def _checker(current: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not normalized or current.is_admin or current.role.lower() in normalized:
            return current
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")

    return _checker


def require_admin() -> Callable:
    return require_role("admin")
