from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

CONTEST_PROBLEMS = 4


class WeeklyEntrySubmit(BaseModel):
    """Create-or-update payload; (owner, week_number) identifies the row."""
    week_number: int = Field(ge=1, description="Positive week number; resubmitting a week overwrites it")
    contest_name: Optional[str] = Field(default=None, max_length=200)
    problems_solved_contest: int = Field(default=0, ge=0, le=CONTEST_PROBLEMS)
    practice_problems_solved: int = Field(default=0, ge=0)

    @field_validator("contest_name")
    @classmethod
    def _blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class WeeklyEntry(BaseModel):
    id: str
    user_id: str
    week_number: int
    contest_name: Optional[str] = None
    problems_in_contest: int = CONTEST_PROBLEMS
    problems_solved_contest: int
    practice_problems_solved: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def total_solved(self) -> int:
        return self.problems_solved_contest + self.practice_problems_solved


class DeleteEntryResponse(BaseModel):
    deleted: bool
    id: str
