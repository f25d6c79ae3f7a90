"""Shared fixtures: an in-memory SQLite database per test."""

from collections.abc import AsyncIterator, Iterator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from roboaudit.config import Settings
from roboaudit.database import build_engine, build_session_maker, create_tables
from roboaudit.main import create_app
from roboaudit.models import Audit, RubricRating

SAMPLE_AUDIT = {
    "prompt": "Hi",
    "response": "Hello",
    "truthfulness": "CORRECT",
    "detail": "BALANCED",
    "safety": "SAFE",
    "quality": "GOOD",
}


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, database_url="sqlite+aiosqlite://", port=8080)


@pytest_asyncio.fixture
async def engine(settings: Settings) -> AsyncIterator[AsyncEngine]:
    engine = build_engine(settings)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_maker(engine)


@pytest.fixture
def count_rows(session_maker: async_sessionmaker[AsyncSession]):
    """Count (audits, rubric_ratings) rows using a fresh session."""

    async def _count() -> tuple[int, int]:
        async with session_maker() as session:
            audits = await session.scalar(select(func.count()).select_from(Audit))
            ratings = await session.scalar(
                select(func.count()).select_from(RubricRating)
            )
        return audits, ratings

    return _count


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    app = create_app(settings)
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
