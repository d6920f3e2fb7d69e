import asyncio
from typing import Optional, List, Tuple
from .repository import profile_repository
from .schemas import Profile, UserRole, AllowedStudent


def resolve_role(roles: List[str]) -> UserRole:
    """A user may hold several role rows; admin wins, student is the default."""
    normalized = {r.lower() for r in roles}
    if UserRole.admin.value in normalized:
        return UserRole.admin
    return UserRole.student


async def get_profile(user_id: str) -> Optional[Profile]:
    row = await profile_repository.get_by_user_id(user_id)
    return Profile(**row) if row else None


async def get_role(user_id: str) -> UserRole:
    return resolve_role(await profile_repository.get_roles(user_id))


async def get_profile_and_role(user_id: str) -> Tuple[Optional[Profile], UserRole]:
    profile, role = await asyncio.gather(get_profile(user_id), get_role(user_id))
    return profile, role


async def list_profiles() -> List[Profile]:
    return [Profile(**p) for p in await profile_repository.list_profiles()]


async def list_profiles_for(user_ids: List[str]) -> List[Profile]:
    return [Profile(**p) for p in await profile_repository.list_by_user_ids(user_ids)]


async def find_allowed_student(register_number: str) -> Optional[AllowedStudent]:
    row = await profile_repository.find_allowed_student(register_number.strip().upper())
    return AllowedStudent(**row) if row else None
