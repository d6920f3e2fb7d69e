from __future__ import annotations

"""
Badge, streak and trend derivation over one student's weekly entries.

Everything here is pure: inputs are never mutated, nothing is cached and the
result depends only on the multiset of entries passed in.

Badge rules:
	- Contest Star: any week with 4/4 contest problems solved
	- On Fire: 3+ adjacent entries (sorted by week) with 3+ contest solved;
	  gaps in week numbering do not break the run
	- Consistency King: 4+ entries whose week numbers are consecutive integers;
	  a gap in week numbering breaks the run
	- Top Performer: granted by the caller (leaderboard rank #1)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Protocol, Sequence


CONTEST_PROBLEMS = 4
ON_FIRE_MIN_SOLVED = 3
ON_FIRE_RUN = 3
CONSISTENCY_RUN = 4
TREND_WINDOW = 3


class EntryLike(Protocol):
    week_number: int
    problems_solved_contest: int
    practice_problems_solved: int


class Trend(str, Enum):
    improving = "improving"
    stable = "stable"
    declining = "declining"


@dataclass(frozen=True)
class Badge:
    id: str
    name: str
    emoji: str
    description: str
    earned: bool


# (min contest average, message), highest tier first; bounds are inclusive
MESSAGE_TIERS: Sequence[tuple[float, str]] = (
    (3.5, "🔥 You're absolutely crushing it! Keep that momentum going!"),
    (2.5, "💪 Great progress! You're getting stronger every week."),
    (1.5, "📈 You're improving! Stay consistent and results will follow."),
    (0.5, "🌱 Every problem solved is a step forward. Keep practicing!"),
)
LOWEST_TIER_MESSAGE = "🚀 Start your journey! Submit your first contest entry."


def sort_by_week(entries: Iterable[EntryLike]) -> List[EntryLike]:
    return sorted(entries, key=lambda e: e.week_number)


def _has_strong_run(ordered: Sequence[EntryLike]) -> bool:
    streak = 0
    for entry in ordered:
        if entry.problems_solved_contest >= ON_FIRE_MIN_SOLVED:
            streak += 1
            if streak >= ON_FIRE_RUN:
                return True
        else:
            streak = 0
    return False


def _has_consecutive_weeks(ordered: Sequence[EntryLike]) -> bool:
    if len(ordered) < CONSISTENCY_RUN:
        return False
    streak = 1
    for prev, cur in zip(ordered, ordered[1:]):
        if cur.week_number == prev.week_number + 1:
            streak += 1
            if streak >= CONSISTENCY_RUN:
                return True
        else:
            streak = 1
    return False


def compute_badges(entries: Iterable[EntryLike], is_top_performer: bool = False) -> List[Badge]:
    ordered = sort_by_week(entries)
    contest_star = any(e.problems_solved_contest == CONTEST_PROBLEMS for e in ordered)
    return [
        Badge("contest_star", "Contest Star", "🌟", "Solved 4/4 in a contest", contest_star),
        Badge("on_fire", "On Fire", "🔥", "3+ weeks in a row with 3+ solved", _has_strong_run(ordered)),
        Badge(
            "consistency_king",
            "Consistency King",
            "💎",
            "4+ consecutive weeks submitted",
            _has_consecutive_weeks(ordered),
        ),
        Badge("top_performer", "Top Performer", "🏆", "Ranked #1 on leaderboard", bool(is_top_performer)),
    ]


def get_performance_trend(entries: Iterable[EntryLike]) -> Trend:
    ordered = sort_by_week(entries)
    if len(ordered) < TREND_WINDOW:
        return Trend.stable
    recent = ordered[-TREND_WINDOW:]
    # Only the window endpoints count; the middle week is ignored.
    diff = recent[-1].problems_solved_contest - recent[0].problems_solved_contest
    if diff > 0:
        return Trend.improving
    if diff < 0:
        return Trend.declining
    return Trend.stable


def get_motivational_message(avg_solved: float) -> str:
    for threshold, message in MESSAGE_TIERS:
        if avg_solved >= threshold:
            return message
    return LOWEST_TIER_MESSAGE


def total_solved(entries: Iterable[EntryLike]) -> int:
    return sum(e.problems_solved_contest + e.practice_problems_solved for e in entries)


def contest_average(entries: Iterable[EntryLike]) -> float:
    values = [e.problems_solved_contest for e in entries]
    if not values:
        return 0.0
    return sum(values) / len(values)


def best_week(entries: Iterable[EntryLike]) -> int:
    return max((e.problems_solved_contest for e in entries), default=0)


def current_streak(entries: Iterable[EntryLike]) -> int:
    """Count back from the newest week while weeks are consecutive and non-zero."""
    newest_first = sorted(entries, key=lambda e: e.week_number, reverse=True)
    streak = 0
    for i, entry in enumerate(newest_first):
        if i > 0 and entry.week_number != newest_first[i - 1].week_number - 1:
            break
        if entry.problems_solved_contest <= 0:
            break
        streak += 1
    return streak


@dataclass(frozen=True)
class ChartPoint:
    week: str
    week_number: int
    contest: int
    practice: int
    total: int


def chart_series(entries: Iterable[EntryLike]) -> List[ChartPoint]:
    return [
        ChartPoint(
            week=f"W{e.week_number}",
            week_number=e.week_number,
            contest=e.problems_solved_contest,
            practice=e.practice_problems_solved,
            total=e.problems_solved_contest + e.practice_problems_solved,
        )
        for e in sort_by_week(entries)
    ]


@dataclass(frozen=True)
class PerformanceReport:
    badges: List[Badge]
    trend: Trend
    message: str
    total_solved: int
    contest_average: float
    best_week: int
    current_streak: int
    entries_count: int
    chart: List[ChartPoint] = field(default_factory=list)


def analyze(entries: Iterable[EntryLike], is_top_performer: bool = False) -> PerformanceReport:
    items = list(entries)
    avg = contest_average(items)
    return PerformanceReport(
        badges=compute_badges(items, is_top_performer),
        trend=get_performance_trend(items),
        message=get_motivational_message(avg),
        total_solved=total_solved(items),
        contest_average=avg,
        best_week=best_week(items),
        current_streak=current_streak(items),
        entries_count=len(items),
        chart=chart_series(items),
    )
