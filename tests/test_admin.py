from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

from app.features.admin import repository as admin_repo
from app.features.admin.schemas import RequestAction, StudentSummary
from app.features.admin.service import AccountService, AdminRequestService, StudentAdminService


def test_students_csv_layout():
    students = [
        StudentSummary(user_id="a", name="Asha", register_number="21CS001", email="a@x.app", total_solved=12, entries_count=3),
        StudentSummary(user_id="b", name="Bala", register_number="21CS002", email=None, total_solved=0, entries_count=0),
    ]
    body = StudentAdminService.students_csv(students)
    assert body.splitlines() == [
        "Name,Register Number,Email,Total Solved,Entries",
        "Asha,21CS001,a@x.app,12,3",
        "Bala,21CS002,,0,0",
    ]


@pytest.mark.anyio("asyncio")
async def test_list_students_aggregates_and_filters(fake_db):
    fake_db.tables["profiles"] = [
        {"user_id": "a", "name": "Asha", "register_number": "21CS001", "email": "a@x.app"},
        {"user_id": "b", "name": "Bala", "register_number": "21CS002", "email": "b@x.app"},
    ]
    fake_db.tables["weekly_entries"] = [
        {"id": "1", "user_id": "a", "week_number": 2, "problems_solved_contest": 3, "practice_problems_solved": 4},
        {"id": "2", "user_id": "a", "week_number": 1, "problems_solved_contest": 1, "practice_problems_solved": 0},
    ]
    students = await StudentAdminService.list_students()
    asha = next(s for s in students if s.user_id == "a")
    assert asha.total_solved == 8
    assert asha.entries_count == 2
    assert [e.week_number for e in asha.entries] == [1, 2]

    filtered = await StudentAdminService.list_students(search="bal")
    assert [s.user_id for s in filtered] == ["b"]


@pytest.mark.anyio("asyncio")
async def test_approving_request_grants_admin_role(fake_db):
    fake_db.tables["admin_requests"] = [{"id": "r1", "user_id": "u9", "status": "pending"}]
    result = await AdminRequestService.decide("r1", RequestAction.approved)

    assert result.role_granted is True
    assert fake_db.tables["admin_requests"][0]["status"] == "approved"
    assert {"user_id": "u9", "role": "admin"} in [
        {k: r[k] for k in ("user_id", "role")} for r in fake_db.tables["user_roles"]
    ]


@pytest.mark.anyio("asyncio")
async def test_denying_request_leaves_roles_alone(fake_db):
    fake_db.tables["admin_requests"] = [{"id": "r1", "user_id": "u9", "status": "pending"}]
    result = await AdminRequestService.decide("r1", RequestAction.denied)

    assert result.role_granted is False
    assert fake_db.tables["admin_requests"][0]["status"] == "denied"
    assert not fake_db.tables.get("user_roles")


@pytest.mark.anyio("asyncio")
async def test_deciding_unknown_request_is_404(fake_db):
    with pytest.raises(HTTPException) as exc:
        await AdminRequestService.decide("missing", RequestAction.approved)
    assert exc.value.status_code == 404


@pytest.mark.anyio("asyncio")
async def test_reset_password_rejects_short_password(monkeypatch):
    update = AsyncMock()
    monkeypatch.setattr(admin_repo.AccountRepository, "update_password", update)
    with pytest.raises(HTTPException) as exc:
        await AccountService.reset_password("u1", "12345")
    assert exc.value.status_code == 400
    update.assert_not_called()


@pytest.mark.anyio("asyncio")
async def test_reset_password_surfaces_backend_error(monkeypatch):
    monkeypatch.setattr(
        admin_repo.AccountRepository, "update_password", AsyncMock(side_effect=Exception("User not found"))
    )
    with pytest.raises(HTTPException) as exc:
        await AccountService.reset_password("u1", "secret-pass")
    assert exc.value.status_code == 400
    assert exc.value.detail == "User not found"


@pytest.mark.anyio("asyncio")
async def test_reset_password_success(monkeypatch):
    update = AsyncMock()
    monkeypatch.setattr(admin_repo.AccountRepository, "update_password", update)
    await AccountService.reset_password("u1", "secret-pass")
    update.assert_awaited_once_with("u1", "secret-pass")


@pytest.mark.anyio("asyncio")
async def test_setup_admin_unknown_username(monkeypatch):
    monkeypatch.setattr(admin_repo.AccountRepository, "find_admin_account", AsyncMock(return_value=None))
    with pytest.raises(HTTPException) as exc:
        await AccountService.setup_admin("stranger", "secret-pass")
    assert exc.value.status_code == 403


@pytest.mark.anyio("asyncio")
async def test_setup_admin_already_created(monkeypatch):
    monkeypatch.setattr(
        admin_repo.AccountRepository,
        "find_admin_account",
        AsyncMock(return_value={"username": "hod", "display_name": "HOD"}),
    )
    monkeypatch.setattr(
        admin_repo.AccountRepository, "find_user_by_email", AsyncMock(return_value=SimpleNamespace(id="x"))
    )
    with pytest.raises(HTTPException) as exc:
        await AccountService.setup_admin("hod", "secret-pass")
    assert exc.value.status_code == 409


@pytest.mark.anyio("asyncio")
async def test_setup_admin_creates_user_and_role(monkeypatch):
    monkeypatch.setattr(
        admin_repo.AccountRepository,
        "find_admin_account",
        AsyncMock(return_value={"username": "HoD", "display_name": "Head of Dept"}),
    )
    monkeypatch.setattr(admin_repo.AccountRepository, "find_user_by_email", AsyncMock(return_value=None))
    create = AsyncMock(return_value=SimpleNamespace(id="new-admin"))
    grant = AsyncMock()
    monkeypatch.setattr(admin_repo.AccountRepository, "create_user", create)
    monkeypatch.setattr(admin_repo.AccountRepository, "grant_role", grant)

    await AccountService.setup_admin("HoD", "secret-pass")

    email, password, metadata = create.await_args.args
    assert email == "hod@teacher.elitecontest.app"
    assert password == "secret-pass"
    assert metadata == {"name": "Head of Dept", "register_number": "HOD", "is_admin": True}
    grant.assert_awaited_once_with("new-admin", "admin")


@pytest.mark.anyio("asyncio")
async def test_setup_admin_short_password(monkeypatch):
    lookup = AsyncMock()
    monkeypatch.setattr(admin_repo.AccountRepository, "find_admin_account", lookup)
    with pytest.raises(HTTPException) as exc:
        await AccountService.setup_admin("hod", "123")
    assert exc.value.status_code == 400
    lookup.assert_not_called()


@pytest.mark.anyio("asyncio")
async def test_find_user_by_email_reads_every_page(monkeypatch):
    monkeypatch.setattr(admin_repo, "USERS_PAGE_SIZE", 2)
    pages = {
        1: [SimpleNamespace(id="1", email="a@x.app"), SimpleNamespace(id="2", email="b@x.app")],
        2: [SimpleNamespace(id="3", email="c@x.app"), SimpleNamespace(id="4", email="HOD@teacher.elitecontest.app")],
        3: [],
    }
    list_users = AsyncMock(side_effect=lambda page, per_page: pages[page])
    client = SimpleNamespace(auth=SimpleNamespace(admin=SimpleNamespace(list_users=list_users)))

    async def fake_get_supabase_admin():
        return client

    monkeypatch.setattr(admin_repo, "get_supabase_admin", fake_get_supabase_admin)

    found = await admin_repo.AccountRepository.find_user_by_email("hod@teacher.elitecontest.app")
    assert found.id == "4"
    assert await admin_repo.AccountRepository.find_user_by_email("nobody@x.app") is None
    assert [c.kwargs["page"] for c in list_users.call_args_list] == [1, 2, 1, 2, 3]


@pytest.mark.anyio("asyncio")
async def test_setup_admin_conflict_reported_by_backend(monkeypatch):
    monkeypatch.setattr(
        admin_repo.AccountRepository,
        "find_admin_account",
        AsyncMock(return_value={"username": "hod", "display_name": "HOD"}),
    )
    monkeypatch.setattr(admin_repo.AccountRepository, "find_user_by_email", AsyncMock(return_value=None))
    monkeypatch.setattr(
        admin_repo.AccountRepository,
        "create_user",
        AsyncMock(side_effect=Exception("A user with this email address has already been registered")),
    )
    grant = AsyncMock()
    monkeypatch.setattr(admin_repo.AccountRepository, "grant_role", grant)

    with pytest.raises(HTTPException) as exc:
        await AccountService.setup_admin("hod", "secret-pass")
    assert exc.value.status_code == 409
    grant.assert_not_called()
