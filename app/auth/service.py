import logging
import httpx
from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from fastapi import HTTPException, Response, status
from .schemas import TokenPair, RegisterRequest
from app.core.config import get_settings
from app.features.profiles.service import find_allowed_student

logger = logging.getLogger("auth.service")
settings = get_settings()

ACCESS_COOKIE_NAME = "access_token"
REFRESH_COOKIE_NAME = "refresh_token"

ACCESS_TTL = 60 * 60  # ~1h; Supabase default
REFRESH_TTL = 30 * 24 * 60 * 60
REFRESH_THRESHOLD = 5 * 60  # refresh when access token expires within this time


def _auth_base() -> str:
    base = get_settings().auth_base
    if not base:
        raise HTTPException(500, "SUPABASE_URL not configured")
    return base

def _select_key(admin: bool = False) -> str:
    key = settings.supabase_service_role_key if admin and settings.supabase_service_role_key else settings.supabase_anon_key
    if not key:
        raise HTTPException(500, "Supabase keys not configured")
    return key

def _json_headers(admin: bool = False) -> dict:
    key = _select_key(admin)
    return {"apikey": key, "Authorization": f"Bearer {key}", "Content-Type": "application/json"}

def _http_client() -> httpx.AsyncClient:
    timeout = httpx.Timeout(connect=3, read=5, write=5, pool=5)
    limits = httpx.Limits(max_connections=20, max_keepalive_connections=10)
    return httpx.AsyncClient(timeout=timeout, limits=limits)

def _error_message(r: httpx.Response, default: str) -> str:
    """Pick the most useful message out of a GoTrue error body."""
    try:
        data = r.json() if r.headers.get("content-type", "").startswith("application/json") else {}
    except ValueError:
        data = {}
    if isinstance(data, dict):
        code = str(data.get("error_code") or data.get("code") or "").lower()
        msg = data.get("msg") or data.get("message") or data.get("error_description") or data.get("error")
        if "email_not_confirmed" in code:
            return "Email not confirmed"
        if msg:
            return str(msg)
    return r.text.strip() or default


async def supabase_sign_up(email: str, password: str, metadata: dict | None = None) -> dict:
    payload: dict = {"email": email.lower(), "password": password}
    if metadata:
        payload["data"] = metadata  # becomes raw_user_meta_data; DB trigger builds the profile
    async with _http_client() as client:
        r = await client.post(f"{_auth_base()}/signup", headers=_json_headers(), json=payload)
    if r.status_code not in (200, 201):
        detail = _error_message(r, f"HTTP {r.status_code}")
        raise HTTPException(status.HTTP_400_BAD_REQUEST, f"Registration failed: {detail}")
    try:
        return r.json()
    except ValueError:
        return {"detail": "registered"}

async def supabase_password_grant(email: str, password: str) -> TokenPair:
    payload = {"email": email.strip().lower(), "password": password}
    async with _http_client() as client:
        r = await client.post(f"{_auth_base()}/token?grant_type=password", headers=_json_headers(), json=payload)
    if r.status_code != 200:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, _error_message(r, "Invalid credentials"))
    body = r.json()
    return TokenPair(
        access_token=body["access_token"],
        refresh_token=body["refresh_token"],
        expires_in=body.get("expires_in"),
    )

async def supabase_refresh(refresh_token: str) -> TokenPair:
    """Refresh tokens. Supabase rotates refresh tokens, so the pair returned carries a new one."""
    payload = {"refresh_token": refresh_token}
    async with _http_client() as client:
        r = await client.post(f"{_auth_base()}/token?grant_type=refresh_token", headers=_json_headers(), json=payload)
    if r.status_code != 200:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, _error_message(r, "Invalid refresh token"))
    body = r.json()
    return TokenPair(
        access_token=body["access_token"],
        refresh_token=body["refresh_token"],
        expires_in=body.get("expires_in"),
    )


async def register_student(payload: RegisterRequest) -> dict:
    """Sign up a student whose register number is on the allowed list."""
    if payload.password != payload.confirm_password:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Passwords don't match")
    if len(payload.password) < settings.min_password_length:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            f"Password must be at least {settings.min_password_length} characters",
        )
    reg = payload.register_number.strip().upper()
    allowed = await find_allowed_student(reg)
    if not allowed:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Register number not found in the allowed student list.")
    logger.info("register_student register_number=%s", reg)
    return await supabase_sign_up(
        settings.student_email(reg),
        payload.password,
        {"name": allowed.name, "register_number": reg},
    )

async def login_student(register_number: str, password: str) -> TokenPair:
    return await supabase_password_grant(settings.student_email(register_number.upper()), password)

async def login_admin(username: str, password: str) -> TokenPair:
    return await supabase_password_grant(settings.teacher_email(username), password)


def get_token_expiry(token: str) -> datetime | None:
    """Extract expiration time from JWT token without verification."""
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return None
    exp = claims.get("exp")
    if not exp:
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc)

def should_refresh_token(access_token: str) -> bool:
    expiry = get_token_expiry(access_token)
    if not expiry:
        return False
    return expiry <= datetime.now(timezone.utc) + timedelta(seconds=REFRESH_THRESHOLD)

def calculate_cookie_max_age(token: str, default_ttl: int) -> int:
    expiry = get_token_expiry(token)
    if not expiry:
        return default_ttl
    remaining = (expiry - datetime.now(timezone.utc)).total_seconds()
    return max(0, int(remaining))

async def refresh_tokens_if_needed(access_token: str, refresh_token: str) -> TokenPair | None:
    """Refresh the pair only when the access token is close to expiring."""
    if not should_refresh_token(access_token):
        return None
    try:
        return await supabase_refresh(refresh_token)
    except HTTPException:
        # Refresh token might be expired or invalid
        return None

def set_auth_cookies(resp: Response, tokens: TokenPair) -> None:
    samesite = settings.cookie_samesite.lower()
    # Access token for all routes
    resp.set_cookie(
        key=ACCESS_COOKIE_NAME,
        value=tokens.access_token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=samesite,  # type: ignore[arg-type]
        domain=settings.cookie_domain,
        max_age=calculate_cookie_max_age(tokens.access_token, ACCESS_TTL),
        path="/",
    )
    # Refresh token is sent site-wide so the session middleware can rotate the pair
    resp.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=tokens.refresh_token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=samesite,  # type: ignore[arg-type]
        domain=settings.cookie_domain,
        max_age=REFRESH_TTL,
        path="/",
    )

def clear_auth_cookies(resp: Response) -> None:
    for name in (ACCESS_COOKIE_NAME, REFRESH_COOKIE_NAME):
        resp.delete_cookie(key=name, domain=settings.cookie_domain, path="/")
