from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from app.common.deps import CurrentUser, require_admin
from app.features.performance.schemas import ChartPointSchema

from .schemas import (
    AdminRequestDecision,
    AdminRequestOut,
    AdminRequestResult,
    ResetPasswordRequest,
    StudentSummary,
    SuccessResponse,
)
from .service import AccountService, AdminRequestService, StudentAdminService

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get(
    "/students",
    response_model=List[StudentSummary],
    summary="List students with totals (Admin)",
    description="Every student profile with total solved, entry count and entries. Optional `search` matches name or register number.",
)
async def list_students(
    search: Optional[str] = Query(default=None),
    user: CurrentUser = Depends(require_admin()),
):
    return await StudentAdminService.list_students(search)


@router.get(
    "/students/export",
    summary="Export students as CSV (Admin)",
    response_class=Response,
)
async def export_students(user: CurrentUser = Depends(require_admin())):
    students = await StudentAdminService.list_students()
    body = StudentAdminService.students_csv(students)
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="students_data.csv"'},
    )


@router.get("/students/{user_id}/chart", response_model=List[ChartPointSchema])
async def student_chart(user_id: str, user: CurrentUser = Depends(require_admin())):
    """Week-by-week contest and practice counts for one student."""
    return await StudentAdminService.student_chart(user_id)


@router.get("/requests", response_model=List[AdminRequestOut], summary="Pending admin-role requests (Admin)")
async def list_requests(user: CurrentUser = Depends(require_admin())):
    return await AdminRequestService.list_pending()


@router.post(
    "/requests/{request_id}",
    response_model=AdminRequestResult,
    summary="Approve or deny an admin-role request (Admin)",
    description="Approving also grants the requester the admin role.",
)
async def decide_request(
    request_id: str,
    decision: AdminRequestDecision,
    user: CurrentUser = Depends(require_admin()),
):
    return await AdminRequestService.decide(request_id, decision.action)


@router.post("/reset-password", response_model=SuccessResponse, summary="Reset a user's password (Admin)")
async def reset_password(payload: ResetPasswordRequest, user: CurrentUser = Depends(require_admin())):
    await AccountService.reset_password(payload.user_id, payload.new_password)
    return SuccessResponse()
