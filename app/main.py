"""Contest tracker API: middleware, error mapping, routers and probes."""

from __future__ import annotations

import logging
import re
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from postgrest.exceptions import APIError

from app.core.config import get_settings
from app.auth.routes import router as auth_router
from app.common.deps import get_current_user
from app.common.middleware import SessionManagementMiddleware
from app.features.profiles.endpoints import router as profiles_router
from app.features.entries.endpoints import router as entries_router
from app.features.dashboard.endpoints import router as dashboard_router
from app.features.leaderboard.endpoints import router as leaderboard_router
from app.features.admin.endpoints import router as admin_router

_settings = get_settings()
logging.basicConfig(
    level=logging.DEBUG if _settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = FastAPI(title=_settings.app_name, version=_settings.app_version)
_START_TIME = datetime.now(timezone.utc)

# Any local dev server port is accepted in addition to ALLOW_ORIGINS.
_LOCAL_ORIGIN_REGEX = re.compile(r"https?://(localhost|127\.0\.0\.1)(:\d+)?", re.I)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.allow_origins,
    allow_origin_regex=_LOCAL_ORIGIN_REGEX.pattern,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SessionManagementMiddleware, auto_refresh=True)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-Id") or request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = req_id
    logger = logging.getLogger("request")
    logger.info("request.start", extra={"request_id": req_id, "path": request.url.path, "method": request.method})
    response = await call_next(request)
    response.headers["X-Request-Id"] = req_id
    logger.info("request.end", extra={"request_id": req_id, "path": request.url.path, "status_code": response.status_code})
    return response


@app.middleware("http")
async def timing_middleware(request: Request, call_next):
    t0 = time.perf_counter()
    resp = await call_next(request)
    dt = int((time.perf_counter() - t0) * 1000)
    logging.getLogger("timing").info("%s %s %dms %s", request.method, request.url.path, dt, resp.status_code)
    return resp


# ------------------------
# Error mapping
# ------------------------
@app.exception_handler(APIError)
async def _postgrest_error(request: Request, exc: APIError):
    logging.getLogger("supabase").warning("postgrest_error path=%s code=%s", request.url.path, exc.code)
    return JSONResponse(status_code=400, content={"detail": exc.message or str(exc)})


@app.exception_handler(RuntimeError)
async def _backend_unavailable(request: Request, exc: RuntimeError):
    logging.getLogger("supabase").error("backend_error path=%s error=%s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


# ------------------------
# Routers
# ------------------------
protected_deps = [Depends(get_current_user)]

app.include_router(auth_router)
app.include_router(profiles_router, dependencies=protected_deps)
app.include_router(entries_router, dependencies=protected_deps)
app.include_router(dashboard_router, dependencies=protected_deps)
app.include_router(leaderboard_router, dependencies=protected_deps)
app.include_router(admin_router, dependencies=protected_deps)


@app.get("/", tags=["meta"], summary="API Root")
async def root():
    return {"name": _settings.app_name, "status": "ok", "docs": "/docs", "health": "/healthz"}


@app.get("/healthz", tags=["meta"], summary="Liveness / readiness probe")
async def healthz() -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    return {
        "status": "ok",
        "time_utc": now.isoformat(),
        "uptime_seconds": round((now - _START_TIME).total_seconds(), 2),
        "version": _settings.app_version,
        "environment": "debug" if _settings.debug else "prod",
        "components": {
            "supabase": "configured" if _settings.configured else "missing-config",
            "service_role": "configured" if _settings.supabase_service_role_key else "missing-config",
        },
    }
