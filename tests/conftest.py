import os
import sys

import pytest

# Ensure repo root on sys.path for imports like `app...`
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "dummy-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "dummy-service-key")

from app.common import cache  # noqa: E402
from tests.fakesupabase import FakeSupabase  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_read_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def fake_db(monkeypatch):
    """Patch every repository module to read and write an in-memory store."""
    from app.features.entries import repository as entries_repo
    from app.features.profiles import repository as profiles_repo
    from app.features.admin import repository as admin_repo

    db = FakeSupabase()

    async def fake_get_supabase_admin():
        return db

    for module in (entries_repo, profiles_repo, admin_repo):
        monkeypatch.setattr(module, "get_supabase_admin", fake_get_supabase_admin)
    return db
