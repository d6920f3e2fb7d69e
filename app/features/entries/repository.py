from typing import Optional, List, Dict, Any
import logging

from app.db.supabase import get_supabase_admin
from app.common import cache
from app.common.utils import timed_query, rows, first_row
from .schemas import WeeklyEntrySubmit

logger = logging.getLogger("entries.repository")

TABLE = "weekly_entries"


class EntryRepository:
    async def list_for_user(self, user_id: str) -> List[dict]:
        async def load() -> List[dict]:
            client = await get_supabase_admin()
            resp = await timed_query(
                client.table(TABLE).select("*").eq("user_id", user_id).order("week_number").execute(),
                op="entries.select_by_user",
            )
            return rows(resp)

        return await cache.fetch(cache.entries_key(user_id), load)

    async def list_all(self) -> List[dict]:
        async def load() -> List[dict]:
            client = await get_supabase_admin()
            resp = await timed_query(client.table(TABLE).select("*").execute(), op="entries.select_all")
            return rows(resp)

        return await cache.fetch(cache.ENTRIES_ALL, load)

    async def list_for_users(self, user_ids: List[str]) -> List[dict]:
        if not user_ids:
            return []
        client = await get_supabase_admin()
        resp = await timed_query(
            client.table(TABLE).select("*").in_("user_id", user_ids).order("week_number").execute(),
            op="entries.select_in_users",
        )
        return rows(resp)

    async def get_by_id(self, entry_id: str) -> Optional[dict]:
        client = await get_supabase_admin()
        resp = await timed_query(
            client.table(TABLE).select("*").eq("id", entry_id).execute(),
            op="entries.select_by_id",
        )
        return first_row(resp)

    async def upsert(self, user_id: str, data: WeeklyEntrySubmit) -> dict:
        client = await get_supabase_admin()
        record: Dict[str, Any] = {**data.model_dump(), "user_id": user_id}
        try:
            resp = await timed_query(
                client.table(TABLE).upsert(record, on_conflict="user_id,week_number").execute(),
                op="entries.upsert",
            )
        finally:
            cache.invalidate_entries(user_id)
        row = first_row(resp)
        if not row:
            raise RuntimeError("Failed to save weekly entry")
        logger.info("entry_saved user_id=%s week=%s", user_id, data.week_number)
        return row

    async def delete(self, entry_id: str, user_id: str) -> bool:
        client = await get_supabase_admin()
        try:
            resp = await timed_query(
                client.table(TABLE).delete().eq("id", entry_id).eq("user_id", user_id).execute(),
                op="entries.delete",
            )
        finally:
            cache.invalidate_entries(user_id)
        return bool(getattr(resp, "data", None))


entry_repository = EntryRepository()
