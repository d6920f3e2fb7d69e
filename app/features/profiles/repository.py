from typing import Optional, List
import logging

from app.db.supabase import get_supabase_admin
from app.common import cache
from app.common.utils import timed_query, rows, first_row

logger = logging.getLogger("profiles.repository")

PROFILE_COLUMNS = "user_id, name, register_number, email, avatar_url"


class ProfileRepository:
    async def get_by_user_id(self, user_id: str) -> Optional[dict]:
        async def load() -> Optional[dict]:
            client = await get_supabase_admin()
            resp = await timed_query(
                client.table("profiles").select(PROFILE_COLUMNS).eq("user_id", user_id).execute(),
                op="profiles.select_by_user_id",
            )
            return first_row(resp)

        # A missing profile is not memoised; the sign-up trigger may still be running.
        return await cache.fetch(cache.profile_key(user_id), load, cache_none=False)

    async def list_profiles(self) -> List[dict]:
        async def load() -> List[dict]:
            client = await get_supabase_admin()
            resp = await timed_query(
                client.table("profiles").select(PROFILE_COLUMNS).execute(),
                op="profiles.list",
            )
            return rows(resp)

        return await cache.fetch(cache.PROFILES_LIST, load)

    async def list_by_user_ids(self, user_ids: List[str]) -> List[dict]:
        if not user_ids:
            return []
        client = await get_supabase_admin()
        resp = await timed_query(
            client.table("profiles").select(PROFILE_COLUMNS).in_("user_id", user_ids).execute(),
            op="profiles.select_in_users",
        )
        return rows(resp)

    async def get_roles(self, user_id: str) -> List[str]:
        async def load() -> List[str]:
            client = await get_supabase_admin()
            resp = await timed_query(
                client.table("user_roles").select("role").eq("user_id", user_id).execute(),
                op="user_roles.select",
            )
            return [str(r["role"]) for r in rows(resp) if r.get("role")]

        return await cache.fetch(cache.roles_key(user_id), load)

    async def find_allowed_student(self, register_number: str) -> Optional[dict]:
        client = await get_supabase_admin()
        resp = await timed_query(
            client.table("allowed_students")
            .select("name, register_number")
            .eq("register_number", register_number)
            .execute(),
            op="allowed_students.select",
        )
        return first_row(resp)


profile_repository = ProfileRepository()
