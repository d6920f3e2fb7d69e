from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.common.deps import CurrentUser, get_current_user
from .schemas import ComparisonResponse, LeaderboardEntry
from .service import leaderboard_service

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("", response_model=List[LeaderboardEntry])
async def read_leaderboard(
    search: Optional[str] = Query(default=None, description="Filter by name or register number"),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Students ranked by total problems solved."""
    return await leaderboard_service.get_leaderboard(search)


@router.get("/contest-average", response_model=List[LeaderboardEntry])
async def read_contest_average_board(
    search: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    return await leaderboard_service.get_contest_average_board(search)


@router.get("/compare", response_model=ComparisonResponse)
async def compare_students(
    user_ids: List[str] = Query(default=[]),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Week-by-week contest results for two or more students."""
    try:
        return await leaderboard_service.compare(user_ids)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
