from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, status

from app.common.deps import get_current_user, require_admin, CurrentUser
from .schemas import Profile
from .service import list_profiles, get_profile

router = APIRouter(prefix="/profiles", tags=["profiles"])

@router.get("/", response_model=list[Profile])
async def read_profiles(current_user: CurrentUser = Depends(require_admin())) -> list[Profile]:
    """Admin: List all profiles."""
    return await list_profiles()

@router.get("/me", response_model=Profile)
async def read_current_profile(current_user: CurrentUser = Depends(get_current_user)) -> Profile:
    """Authenticated user: their own profile row (created by the sign-up trigger)."""
    prof = await get_profile(current_user.id)
    if not prof:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return prof

@router.get("/{user_id}", response_model=Profile)
async def read_profile(user_id: str, current_user: CurrentUser = Depends(require_admin())) -> Profile:
    prof = await get_profile(user_id)
    if not prof:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return prof
