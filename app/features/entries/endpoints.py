from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.common.deps import CurrentUser, get_current_user, require_admin
from .schemas import WeeklyEntry, WeeklyEntrySubmit, DeleteEntryResponse
from .service import list_entries, submit_entry, delete_entry

router = APIRouter(prefix="/entries", tags=["entries"])


@router.get("/me", response_model=List[WeeklyEntry])
async def read_my_entries(current_user: CurrentUser = Depends(get_current_user)) -> List[WeeklyEntry]:
    """Authenticated user: own entries, oldest week first."""
    return await list_entries(current_user.id)


@router.post("", response_model=WeeklyEntry, status_code=status.HTTP_201_CREATED)
async def submit_my_entry(
    payload: WeeklyEntrySubmit,
    current_user: CurrentUser = Depends(get_current_user),
) -> WeeklyEntry:
    """Create or overwrite the caller's entry for ``week_number``."""
    return await submit_entry(current_user.id, payload)


@router.delete("/{entry_id}", response_model=DeleteEntryResponse)
async def remove_entry(
    entry_id: str,
    current_user: CurrentUser = Depends(get_current_user),
) -> DeleteEntryResponse:
    owner = await delete_entry(entry_id, current_user)
    if owner is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")
    return DeleteEntryResponse(deleted=True, id=entry_id)


@router.get("/user/{user_id}", response_model=List[WeeklyEntry])
async def read_user_entries(
    user_id: str,
    current_user: CurrentUser = Depends(require_admin()),
) -> List[WeeklyEntry]:
    """Admin-only: entries for any student."""
    return await list_entries(user_id)
