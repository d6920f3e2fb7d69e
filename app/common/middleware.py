"""Middleware for refreshing session cookies before the access token expires."""

import logging
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.auth.service import (
    refresh_tokens_if_needed,
    set_auth_cookies,
    ACCESS_COOKIE_NAME,
    REFRESH_COOKIE_NAME,
    should_refresh_token,
)

logger = logging.getLogger("session_middleware")

EXCLUDED_PATHS = frozenset({
    "/auth/login",
    "/auth/admin-login",
    "/auth/register",
    "/auth/setup-admin",
    "/auth/refresh",
    "/auth/logout",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/healthz",
    "/",
})


class SessionManagementMiddleware(BaseHTTPMiddleware):
    """Rotate auth cookies when the access token is close to expiring."""

    def __init__(self, app: ASGIApp, auto_refresh: bool = True):
        super().__init__(app)
        self.auto_refresh = auto_refresh

    async def dispatch(self, request: Request, call_next) -> Response:
        if not self.auto_refresh or request.url.path in EXCLUDED_PATHS:
            return await call_next(request)

        access_token = request.cookies.get(ACCESS_COOKIE_NAME)
        refresh_token = request.cookies.get(REFRESH_COOKIE_NAME)

        if access_token and refresh_token and should_refresh_token(access_token):
            new_tokens = await refresh_tokens_if_needed(access_token, refresh_token)
            if new_tokens:
                response = await call_next(request)
                set_auth_cookies(response, new_tokens)
                logger.info("Auto-refreshed tokens for request to %s", request.url.path)
                return response

        return await call_next(request)
