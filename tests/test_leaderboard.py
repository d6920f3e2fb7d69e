import pytest

from app.features.entries.schemas import WeeklyEntry
from app.features.leaderboard.service import (
    build_comparison,
    by_contest_average,
    leaderboard_service,
    rank_students,
)
from app.features.profiles.schemas import Profile

pytestmark = pytest.mark.anyio("asyncio")


def profile(uid, name, reg):
    return Profile(user_id=uid, name=name, register_number=reg)


def entry(uid, week, contest, practice=0):
    return WeeklyEntry(
        id=f"{uid}-{week}",
        user_id=uid,
        week_number=week,
        problems_solved_contest=contest,
        practice_problems_solved=practice,
    )


PROFILES = [
    profile("a", "Asha", "21CS001"),
    profile("b", "Bala", "21CS002"),
    profile("c", "Chitra", "21CS003"),
]


def top_badge(row):
    return next(b.earned for b in row.badges if b.id == "top_performer")


def test_rank_by_total_solved_including_practice():
    entries = [
        entry("a", 1, 4),
        entry("b", 1, 1, practice=10),
        entry("c", 1, 2),
    ]
    board = rank_students(PROFILES, entries)
    assert [r.user_id for r in board] == ["b", "a", "c"]
    assert [r.rank for r in board] == [1, 2, 3]
    assert top_badge(board[0]) is True
    assert not any(top_badge(r) for r in board[1:])


def test_tie_goes_to_first_encountered():
    entries = [entry("a", 1, 2), entry("b", 1, 2)]
    board = rank_students(PROFILES, entries)
    assert board[0].user_id == "a"
    assert top_badge(board[0]) is True
    assert top_badge(board[1]) is False


def test_students_without_entries_still_listed():
    board = rank_students(PROFILES, [entry("c", 1, 1)])
    assert len(board) == 3
    assert board[-1].entries_count == 0
    assert board[-1].contest_avg == 0.0


def test_contest_average_rounded_to_two_places():
    entries = [entry("a", 1, 1), entry("a", 2, 1), entry("a", 3, 2)]
    row = rank_students(PROFILES[:1], entries)[0]
    assert row.contest_avg == 1.33


def test_contest_average_board_sorting():
    entries = [entry("a", 1, 1, practice=20), entry("b", 1, 4)]
    board = by_contest_average(rank_students(PROFILES[:2], entries))
    assert [r.user_id for r in board] == ["b", "a"]
    assert [r.rank for r in board] == [1, 2]
    # top performer stays with the total-solved leader
    assert top_badge(board[1]) is True


def test_comparison_fills_missing_weeks_with_zero():
    entries = [entry("a", 1, 3), entry("a", 3, 4), entry("b", 2, 1)]
    result = build_comparison(["a", "b"], PROFILES, entries)
    assert [r.week for r in result.rows] == ["W1", "W2", "W3"]
    assert result.rows[0].values == {"Asha": 3, "Bala": 0}
    assert result.rows[1].values == {"Asha": 0, "Bala": 1}


def test_comparison_falls_back_to_id_without_profile():
    result = build_comparison(["a", "zz"], PROFILES, [entry("zz", 1, 2)])
    assert result.rows[0].values == {"Asha": 0, "zz": 2}


@pytest.mark.anyio("asyncio")
async def test_compare_needs_two_students(fake_db):
    with pytest.raises(ValueError):
        await leaderboard_service.compare(["a", "a"])


@pytest.mark.anyio("asyncio")
async def test_leaderboard_search_keeps_rank(fake_db):
    fake_db.tables["profiles"] = [p.model_dump() for p in PROFILES]
    fake_db.tables["weekly_entries"] = [
        entry("a", 1, 1).model_dump(),
        entry("b", 1, 4).model_dump(),
    ]
    rows = await leaderboard_service.get_leaderboard(search="21cs001")
    assert len(rows) == 1
    assert rows[0].name == "Asha"
    assert rows[0].rank == 2


@pytest.mark.anyio("asyncio")
async def test_contest_average_board_numbers_filtered_rows(fake_db):
    fake_db.tables["profiles"] = [p.model_dump() for p in PROFILES]
    fake_db.tables["weekly_entries"] = [
        entry("a", 1, 1, practice=30).model_dump(),
        entry("b", 1, 2, practice=10).model_dump(),
        entry("c", 1, 4).model_dump(),
    ]
    board = await leaderboard_service.get_contest_average_board()
    assert [(r.user_id, r.rank) for r in board] == [("c", 1), ("b", 2), ("a", 3)]


@pytest.mark.anyio("asyncio")
async def test_leaderboard_tolerates_profiles_without_register_number(fake_db):
    fake_db.tables["profiles"] = [
        {"user_id": "t", "name": "Teacher", "register_number": None, "email": None},
        {"user_id": "a", "name": None, "register_number": "21CS001", "email": None},
    ]
    fake_db.tables["weekly_entries"] = [entry("a", 1, 3).model_dump()]

    board = await leaderboard_service.get_leaderboard()
    assert [(r.user_id, r.name, r.register_number) for r in board] == [("a", "", "21CS001"), ("t", "Teacher", "")]

    filtered = await leaderboard_service.get_leaderboard(search="teach")
    assert [r.user_id for r in filtered] == ["t"]
