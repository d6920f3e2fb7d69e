from fastapi import APIRouter, Depends, Response, Request, status
from .schemas import RegisterRequest, LoginRequest, AdminLoginRequest, SetupAdminRequest, SessionInfo
from .service import (
    register_student,
    login_student,
    login_admin,
    supabase_refresh,
    set_auth_cookies,
    clear_auth_cookies,
    REFRESH_COOKIE_NAME,
)
from app.common import cache
from app.common.deps import CurrentUser, get_current_user
from app.features.admin.service import AccountService

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest):
    await register_student(payload)
    return {"detail": "Account created! You can now log in with your register number."}

@router.post("/login", status_code=status.HTTP_200_OK)
async def login(payload: LoginRequest, resp: Response):
    """Authenticate a student with register number + password."""
    tokens = await login_student(payload.register_number, payload.password)
    set_auth_cookies(resp, tokens)
    return {"detail": "Logged in", "access_token": tokens.access_token, "refresh_token": tokens.refresh_token}

@router.post("/admin-login", status_code=status.HTTP_200_OK)
async def admin_login(payload: AdminLoginRequest, resp: Response):
    """Authenticate a teacher with their admin username + password."""
    tokens = await login_admin(payload.username, payload.password)
    set_auth_cookies(resp, tokens)
    return {"detail": "Logged in", "access_token": tokens.access_token, "refresh_token": tokens.refresh_token}

@router.post("/setup-admin", status_code=status.HTTP_201_CREATED)
async def setup_admin(payload: SetupAdminRequest):
    await AccountService.setup_admin(payload.username, payload.password)
    return {"success": True}

@router.post("/refresh", response_model=None)
async def refresh(request: Request, resp: Response, refresh_token: str | None = None):
    # Prefer cookie; allow query param for tooling.
    token = refresh_token or request.cookies.get(REFRESH_COOKIE_NAME)
    if not token:
        return {"detail": "No refresh token"}
    tokens = await supabase_refresh(token)
    set_auth_cookies(resp, tokens)
    return {"detail": "Refreshed", "access_token": tokens.access_token, "refresh_token": tokens.refresh_token}

@router.post("/logout", response_model=None)
async def logout(resp: Response, user: CurrentUser = Depends(get_current_user)):
    cache.invalidate_user(user.id)
    clear_auth_cookies(resp)
    return {"detail": "Logged out"}

@router.get("/me", response_model=SessionInfo)
async def me(user: CurrentUser = Depends(get_current_user)):
    return SessionInfo(**user.model_dump())
