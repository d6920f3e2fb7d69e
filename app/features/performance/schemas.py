from __future__ import annotations

from pydantic import BaseModel


class BadgeSchema(BaseModel):
    id: str
    name: str
    emoji: str
    description: str
    earned: bool

    class Config:
        from_attributes = True


class ChartPointSchema(BaseModel):
    week: str
    week_number: int
    contest: int
    practice: int
    total: int

    class Config:
        from_attributes = True

