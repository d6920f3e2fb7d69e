from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Dict, List, Optional

from app.common.utils import dedupe, matches_search
from app.features.entries.schemas import WeeklyEntry
from app.features.entries.service import list_all_entries, list_entries_for_users
from app.features.performance.analyzer import compute_badges, contest_average, total_solved
from app.features.performance.schemas import BadgeSchema
from app.features.profiles.schemas import Profile
from app.features.profiles.service import list_profiles, list_profiles_for
from .schemas import ComparisonResponse, ComparisonRow, LeaderboardEntry

logger = logging.getLogger("leaderboard.service")

MIN_COMPARE = 2


def group_by_user(entries: List[WeeklyEntry]) -> Dict[str, List[WeeklyEntry]]:
    grouped: Dict[str, List[WeeklyEntry]] = defaultdict(list)
    for e in entries:
        grouped[e.user_id].append(e)
    return grouped


def rank_students(profiles: List[Profile], entries: List[WeeklyEntry]) -> List[LeaderboardEntry]:
    """Rank by total solved (contest + practice), highest first.

    The sort is stable, so ties keep profile order and the first one
    encountered takes rank 1 and the Top Performer badge.
    """
    by_user = group_by_user(entries)
    scored = [(p, by_user.get(p.user_id, [])) for p in profiles]
    scored.sort(key=lambda pair: total_solved(pair[1]), reverse=True)

    board: List[LeaderboardEntry] = []
    for idx, (profile, user_entries) in enumerate(scored):
        badges = compute_badges(user_entries, is_top_performer=(idx == 0))
        board.append(
            LeaderboardEntry(
                rank=idx + 1,
                user_id=profile.user_id,
                name=profile.name,
                register_number=profile.register_number,
                total_solved=total_solved(user_entries),
                contest_avg=round(contest_average(user_entries), 2),
                entries_count=len(user_entries),
                badges=[BadgeSchema.model_validate(b) for b in badges],
            )
        )
    return board


def by_contest_average(board: List[LeaderboardEntry]) -> List[LeaderboardEntry]:
    """Re-sort by contest average; ranks are renumbered by position on this board."""
    ordered = sorted(board, key=lambda row: row.contest_avg, reverse=True)
    return [row.model_copy(update={"rank": i + 1}) for i, row in enumerate(ordered)]


def build_comparison(user_ids: List[str], profiles: List[Profile], entries: List[WeeklyEntry]) -> ComparisonResponse:
    names = {p.user_id: p.name for p in profiles if p.name}
    lookup = {(e.user_id, e.week_number): e.problems_solved_contest for e in entries if e.user_id in user_ids}
    weeks = sorted({week for (_, week) in lookup})
    rows = [
        ComparisonRow(
            week=f"W{w}",
            week_number=w,
            values={names.get(uid, uid): lookup.get((uid, w), 0) for uid in user_ids},
        )
        for w in weeks
    ]
    students = [{"user_id": uid, "name": names.get(uid)} for uid in user_ids]
    return ComparisonResponse(students=students, rows=rows)


class LeaderboardService:
    async def get_leaderboard(self, search: Optional[str] = None) -> List[LeaderboardEntry]:
        profiles, entries = await asyncio.gather(list_profiles(), list_all_entries())
        board = rank_students(profiles, entries)
        return [row for row in board if matches_search(search, row.name, row.register_number)]

    async def get_contest_average_board(self, search: Optional[str] = None) -> List[LeaderboardEntry]:
        return by_contest_average(await self.get_leaderboard(search))

    async def compare(self, user_ids: List[str]) -> ComparisonResponse:
        ids = dedupe(user_ids)
        if len(ids) < MIN_COMPARE:
            raise ValueError(f"Select at least {MIN_COMPARE} students to compare")
        profiles, entries = await asyncio.gather(list_profiles_for(ids), list_entries_for_users(ids))
        logger.info("leaderboard_compare students=%d entries=%d", len(ids), len(entries))
        return build_comparison(ids, profiles, entries)


leaderboard_service = LeaderboardService()
