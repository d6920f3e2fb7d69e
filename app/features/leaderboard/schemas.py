from __future__ import annotations

from typing import Dict, List, Union

from pydantic import BaseModel

from app.features.performance.schemas import BadgeSchema


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    name: str
    register_number: str
    total_solved: int
    contest_avg: float
    entries_count: int
    badges: List[BadgeSchema]


class ComparisonRow(BaseModel):
    """One week of a side-by-side comparison; ``values`` maps student name to contest solved."""
    week: str
    week_number: int
    values: Dict[str, int]


class ComparisonResponse(BaseModel):
    students: List[Dict[str, Union[str, None]]]
    rows: List[ComparisonRow]
