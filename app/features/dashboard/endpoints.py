from fastapi import APIRouter, Depends
from app.common.deps import get_current_user, require_admin, CurrentUser
from .service import dashboard_service
from .schema import StudentDashboardOut


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/me", response_model=StudentDashboardOut)
async def get_my_dashboard(current_user: CurrentUser = Depends(get_current_user)):
    """Stats, trend, badges and motivational message for the caller."""
    return await dashboard_service.get_dashboard(current_user.id)


@router.get("/{user_id}", response_model=StudentDashboardOut)
async def get_student_dashboard(user_id: str, current_user: CurrentUser = Depends(require_admin())):
    return await dashboard_service.get_dashboard(user_id)
