import random
from datetime import datetime, timezone
from typing import List, Sequence, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from prometheus_client import CollectorRegistry
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from config import Settings
from dependencies import Container
from main import create_app
from models.models import Base
from services.contracts import AddTeamIn, CreatePullRequestIn, TeamMemberRecord
from services.reviewers import Randomizer


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class SpyRandomizer(Randomizer):
    """Seeded randomizer that records the size of every shuffle."""

    def __init__(self):
        super().__init__(random.Random(42))
        self.calls: List[int] = []

    def shuffle(self, n, swap):
        self.calls.append(n)
        super().shuffle(n, swap)


class ReversingRandomizer(SpyRandomizer):
    """Always produces the reversed order, so selections are predictable."""

    def shuffle(self, n, swap):
        self.calls.append(n)
        for i in range(n // 2):
            swap(i, n - 1 - i)


class FixedClock:
    """Clock that stays where the test puts it."""

    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current


@pytest.fixture
def settings():
    return Settings(DATABASE_URL=TEST_DATABASE_URL, MAX_PR_REVIEWERS=2, LOG_LEVEL="DEBUG")


@pytest.fixture
def randomizer():
    return ReversingRandomizer()


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 11, 1, 12, 0, tzinfo=timezone.utc))


@pytest_asyncio.fixture
async def session_maker():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def container(settings, session_maker, randomizer, clock):
    return Container(settings, session_maker, randomizer=randomizer, clock=clock, registry=CollectorRegistry())


@pytest_asyncio.fixture
async def client(settings, session_maker, randomizer, clock):
    app = create_app(
        settings=settings,
        session_maker=session_maker,
        randomizer=randomizer,
        clock=clock,
        registry=CollectorRegistry(),
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def add_team(container: Container, team_name: str, members: Sequence[Tuple[str, bool]]):
    """Create a team from ``(user_id, is_active)`` pairs."""
    return await container.add_team.run(AddTeamIn(
        team_name=team_name,
        members=[
            TeamMemberRecord(user_id=user_id, username=f"User {user_id}", is_active=is_active)
            for user_id, is_active in members
        ],
    ))


async def create_pr(container: Container, pr_id: str, author_id: str):
    return await container.create_pull_request.run(CreatePullRequestIn(
        pull_request_id=pr_id,
        pull_request_name=f"Change {pr_id}",
        author_id=author_id,
    ))


async def reviewer_ids(container: Container, pr_id: str) -> List[str]:
    return sorted(row.reviewer_id for row in await container.pr_reviewers.get_by_pr_id(pr_id))
