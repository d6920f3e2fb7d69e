from __future__ import annotations

import asyncio
from typing import List, Optional

from app.features.entries.schemas import WeeklyEntry
from app.features.entries.service import list_entries
from app.features.performance.analyzer import analyze
from app.features.performance.schemas import BadgeSchema, ChartPointSchema
from app.features.profiles.schemas import Profile
from app.features.profiles.service import get_profile
from .schema import StudentDashboardOut


def build_dashboard(user_id: str, entries: List[WeeklyEntry], profile: Optional[Profile] = None) -> StudentDashboardOut:
    """Assemble the dashboard from already-fetched rows; badges are recomputed every call."""
    report = analyze(entries)
    return StudentDashboardOut(
        user_id=user_id,
        name=profile.name if profile else "",
        register_number=profile.register_number if profile else "",
        avatar_url=profile.avatar_url if profile else None,
        total_solved=report.total_solved,
        contest_average=round(report.contest_average, 1),
        best_week=report.best_week,
        current_streak=report.current_streak,
        entries_count=report.entries_count,
        trend=report.trend,
        message=report.message,
        badges=[BadgeSchema.model_validate(b) for b in report.badges],
        chart=[ChartPointSchema.model_validate(p) for p in report.chart],
        entries=sorted(entries, key=lambda e: e.week_number, reverse=True),
    )


class DashboardService:
    async def get_dashboard(self, user_id: str) -> StudentDashboardOut:
        entries, profile = await asyncio.gather(list_entries(user_id), get_profile(user_id))
        return build_dashboard(user_id, entries, profile)


dashboard_service = DashboardService()
