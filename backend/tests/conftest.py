import asyncio

import pytest

from database import get_db
from models import init_db
from models.identity import UserSession, UserRole
from seed import seed_if_empty


async def _prepare(path, seed):
    await init_db(path)
    if seed:
        async with get_db(path) as db:
            await seed_if_empty(db)


@pytest.fixture
def db_path(tmp_path):
    """Empty schema in a fresh SQLite file."""
    path = str(tmp_path / "jobs.db")
    asyncio.run(_prepare(path, seed=False))
    return path


@pytest.fixture
def seeded_db(tmp_path):
    """Schema plus demo locations (loc-lis = facility 16) and personnel."""
    path = str(tmp_path / "jobs.db")
    asyncio.run(_prepare(path, seed=True))
    return path


@pytest.fixture
def session():
    return UserSession(user_id="user-1", role=UserRole.MANAGER)
