from typing import List, Optional

from app.common.deps import CurrentUser
from .repository import entry_repository
from .schemas import WeeklyEntry, WeeklyEntrySubmit


def to_entries(raw: List[dict]) -> List[WeeklyEntry]:
    return [WeeklyEntry(**r) for r in raw]


async def list_entries(user_id: str) -> List[WeeklyEntry]:
    return to_entries(await entry_repository.list_for_user(user_id))


async def list_all_entries() -> List[WeeklyEntry]:
    return to_entries(await entry_repository.list_all())


async def list_entries_for_users(user_ids: List[str]) -> List[WeeklyEntry]:
    return to_entries(await entry_repository.list_for_users(user_ids))


async def submit_entry(user_id: str, data: WeeklyEntrySubmit) -> WeeklyEntry:
    return WeeklyEntry(**await entry_repository.upsert(user_id, data))


async def delete_entry(entry_id: str, user: CurrentUser) -> Optional[str]:
    """Delete an entry the caller may manage; returns the owner id or None if not found."""
    existing = await entry_repository.get_by_id(entry_id)
    if not existing:
        return None
    owner = str(existing.get("user_id"))
    if owner != user.id and not user.is_admin:
        # Hide foreign rows the same way row-level rules would.
        return None
    deleted = await entry_repository.delete(entry_id, owner)
    return owner if deleted else None
