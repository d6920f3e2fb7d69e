import logging
from typing import Any, Dict, List, Optional

from app.db.supabase import get_supabase_admin
from app.common import cache
from app.common.utils import timed_query, rows, first_row

logger = logging.getLogger("admin.repository")

USERS_PAGE_SIZE = 1000


class AdminRequestRepository:

    @staticmethod
    async def list_pending() -> List[dict]:
        client = await get_supabase_admin()
        resp = await timed_query(
            client.table("admin_requests")
            .select("*, profiles!admin_requests_user_id_fkey(name, register_number)")
            .eq("status", "pending")
            .execute(),
            op="admin_requests.select_pending",
        )
        return rows(resp)

    @staticmethod
    async def get(request_id: str) -> Optional[dict]:
        client = await get_supabase_admin()
        resp = await timed_query(
            client.table("admin_requests").select("*").eq("id", request_id).execute(),
            op="admin_requests.select_by_id",
        )
        return first_row(resp)

    @staticmethod
    async def set_status(request_id: str, status: str) -> Optional[dict]:
        client = await get_supabase_admin()
        resp = await timed_query(
            client.table("admin_requests").update({"status": status}).eq("id", request_id).execute(),
            op="admin_requests.update",
        )
        return first_row(resp)


class AccountRepository:
    """Privileged account operations; every call uses the service-role client."""

    @staticmethod
    async def grant_role(user_id: str, role: str) -> None:
        client = await get_supabase_admin()
        await timed_query(
            client.table("user_roles").upsert({"user_id": user_id, "role": role}, on_conflict="user_id,role").execute(),
            op="user_roles.upsert",
        )
        cache.clear(cache.roles_key(user_id))

    @staticmethod
    async def find_admin_account(username: str) -> Optional[dict]:
        client = await get_supabase_admin()
        resp = await timed_query(
            client.table("admin_accounts").select("username, display_name").eq("username", username).execute(),
            op="admin_accounts.select",
        )
        return first_row(resp)

    @staticmethod
    async def find_user_by_email(email: str) -> Optional[Any]:
        """Scan auth users page by page; GoTrue has no lookup-by-email endpoint."""
        client = await get_supabase_admin()
        target = email.lower()
        page = 1
        while True:
            users = await timed_query(
                client.auth.admin.list_users(page=page, per_page=USERS_PAGE_SIZE),
                op="auth.list_users",
            )
            for user in users or []:
                if (getattr(user, "email", None) or "").lower() == target:
                    return user
            if not users or len(users) < USERS_PAGE_SIZE:
                return None
            page += 1

    @staticmethod
    async def create_user(email: str, password: str, metadata: Dict[str, Any]) -> Any:
        client = await get_supabase_admin()
        resp = await timed_query(
            client.auth.admin.create_user(
                {"email": email, "password": password, "email_confirm": True, "user_metadata": metadata}
            ),
            op="auth.create_user",
        )
        return getattr(resp, "user", None)

    @staticmethod
    async def update_password(user_id: str, new_password: str) -> None:
        client = await get_supabase_admin()
        await timed_query(
            client.auth.admin.update_user_by_id(user_id, {"password": new_password}),
            op="auth.update_user_by_id",
        )
