from pydantic import BaseModel
from typing import List, Optional

from app.features.entries.schemas import WeeklyEntry
from app.features.performance.analyzer import Trend
from app.features.performance.schemas import BadgeSchema, ChartPointSchema


class StudentDashboardOut(BaseModel):
    user_id: str
    name: str = ""
    register_number: str = ""
    total_solved: int
    contest_average: float
    best_week: int
    current_streak: int
    entries_count: int
    trend: Trend
    message: str
    badges: List[BadgeSchema]
    chart: List[ChartPointSchema] = []
    entries: List[WeeklyEntry] = []
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True
