import asyncio
import csv
import io
import logging
from typing import List, Optional

from fastapi import HTTPException, status

from app.common import cache
from app.common.utils import matches_search
from app.core.config import get_settings
from app.features.entries.service import list_all_entries, list_entries
from app.features.leaderboard.service import group_by_user
from app.features.performance.analyzer import chart_series, total_solved
from app.features.performance.schemas import ChartPointSchema
from app.features.profiles.schemas import UserRole
from app.features.profiles.service import list_profiles

from .repository import AdminRequestRepository, AccountRepository
from .schemas import (
    AdminRequestOut,
    AdminRequestResult,
    RequestAction,
    StudentSummary,
)

logger = logging.getLogger("admin.service")

ADMIN_EXISTS_MESSAGE = "Admin account already created. Please log in."
CSV_HEADER = ["Name", "Register Number", "Email", "Total Solved", "Entries"]


class StudentAdminService:

    @staticmethod
    async def list_students(search: Optional[str] = None) -> List[StudentSummary]:
        profiles, entries = await asyncio.gather(list_profiles(), list_all_entries())
        by_user = group_by_user(entries)
        result = []
        for p in profiles:
            user_entries = sorted(by_user.get(p.user_id, []), key=lambda e: e.week_number)
            if not matches_search(search, p.name, p.register_number):
                continue
            result.append(
                StudentSummary(
                    user_id=p.user_id,
                    name=p.name,
                    register_number=p.register_number,
                    email=p.email,
                    total_solved=total_solved(user_entries),
                    entries_count=len(user_entries),
                    entries=user_entries,
                )
            )
        return result

    @staticmethod
    async def student_chart(user_id: str) -> List[ChartPointSchema]:
        entries = await list_entries(user_id)
        return [ChartPointSchema.model_validate(p) for p in chart_series(entries)]

    @staticmethod
    def students_csv(students: List[StudentSummary]) -> str:
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for s in students:
            writer.writerow([s.name, s.register_number, s.email or "", s.total_solved, s.entries_count])
        return buf.getvalue()


class AdminRequestService:

    @staticmethod
    async def list_pending() -> List[AdminRequestOut]:
        result = []
        for r in await AdminRequestRepository.list_pending():
            joined = r.get("profiles") or {}
            result.append(
                AdminRequestOut(
                    id=str(r["id"]),
                    user_id=str(r["user_id"]),
                    status=r.get("status") or "pending",
                    name=joined.get("name"),
                    register_number=joined.get("register_number"),
                    created_at=r.get("created_at"),
                )
            )
        return result

    @staticmethod
    async def decide(request_id: str, action: RequestAction) -> AdminRequestResult:
        existing = await AdminRequestRepository.get(request_id)
        if not existing:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Admin request not found")
        await AdminRequestRepository.set_status(request_id, action.value)
        granted = False
        if action is RequestAction.approved:
            await AccountRepository.grant_role(str(existing["user_id"]), UserRole.admin.value)
            granted = True
        logger.info("admin_request_processed id=%s action=%s", request_id, action.value)
        return AdminRequestResult(id=request_id, status=action, role_granted=granted)


class AccountService:

    @staticmethod
    def _check_password(password: str, message: str) -> None:
        if not password or len(password) < get_settings().min_password_length:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)

    @staticmethod
    async def reset_password(user_id: str, new_password: str) -> None:
        min_len = get_settings().min_password_length
        AccountService._check_password(
            new_password, f"Invalid input. Password must be at least {min_len} characters."
        )
        try:
            await AccountRepository.update_password(user_id, new_password)
        except RuntimeError:
            raise
        except Exception as e:
            logger.warning("reset_password_failed user_id=%s error=%s", user_id, e)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        cache.invalidate_user(user_id)
        logger.info("password_reset user_id=%s", user_id)

    @staticmethod
    async def setup_admin(username: str, password: str) -> None:
        """First-time creation of a teacher login for a pre-listed admin username."""
        min_len = get_settings().min_password_length
        AccountService._check_password(password, f"Username and password (min {min_len} chars) required.")
        username = username.strip()
        account = await AccountRepository.find_admin_account(username)
        if not account:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid admin username.")

        email = get_settings().teacher_email(username)
        if await AccountRepository.find_user_by_email(email):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ADMIN_EXISTS_MESSAGE)

        try:
            user = await AccountRepository.create_user(
                email,
                password,
                {
                    "name": account.get("display_name") or username,
                    "register_number": username.upper(),
                    "is_admin": True,
                },
            )
        except RuntimeError:
            raise
        except Exception as e:
            # Covers a user created between the lookup and this call.
            if "already" in str(e).lower():
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ADMIN_EXISTS_MESSAGE)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        # The sign-up trigger only assigns the student role.
        if user is not None:
            await AccountRepository.grant_role(str(user.id), UserRole.admin.value)
        logger.info("admin_account_created username=%s", username)
