import asyncio
import os
import uuid
from datetime import datetime
from datetime import timedelta
from datetime import timezone

os.environ.setdefault("TESTING", "1")

import asyncpg  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport  # noqa: E402
from httpx import AsyncClient  # noqa: E402

from apps.entities.teams.managers import TeamManager  # noqa: E402
from apps.entities.teams.schemas import TeamCreate  # noqa: E402
from apps.entities.teams.schemas import TeamMember  # noqa: E402
from db import create_tables  # noqa: E402
from db import metadata  # noqa: E402
from db import new_database  # noqa: E402
from db.memory import MemoryUnitOfWork  # noqa: E402
from services.api.deps import get_unit_of_work  # noqa: E402
from services.api.main import app  # noqa: E402


class TickingClock:
    """Deterministic clock, one second forward per call."""

    def __init__(self, start: datetime = datetime(2025, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def uow(clock):
    return MemoryUnitOfWork(clock=clock)


@pytest.fixture
def create_team(uow):
    """Create a team from {username: is_active}; returns {username: User}."""

    async def _create(team_name: str, members: dict[str, bool]) -> dict:
        team = await TeamManager(uow).create(
            TeamCreate(
                team_name=team_name,
                members=[
                    TeamMember(user_id=uuid.uuid4(), username=username, is_active=is_active)
                    for username, is_active in members.items()
                ],
            )
        )
        return {user.username: user for user in team.users}

    return _create


@pytest.fixture
async def client(uow):
    """Test client for testing API, backed by in-memory stores."""
    app.dependency_overrides[get_unit_of_work] = lambda: uow
    http_client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    yield http_client
    await http_client.aclose()
    app.dependency_overrides.clear()

@pytest.fixture
async def pg_database():
    """Own connection pool without force_rollback, so concurrent transactions
    get separate connections. Tables are emptied after each test."""
    database = new_database()
    try:
        await asyncio.wait_for(database.connect(), timeout=5)
    except (OSError, asyncio.TimeoutError, asyncpg.PostgresError) as e:
        pytest.skip(f"PostgreSQL is not available: {e}")
    await create_tables(database)
    try:
        yield database
    finally:
        tables = ", ".join(table.name for table in reversed(metadata.sorted_tables))
        await database.execute(f"TRUNCATE {tables} CASCADE")
        await database.disconnect()
