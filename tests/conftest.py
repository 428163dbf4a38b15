"""Shared fixtures: a throwaway SQLite database behind the FastAPI app."""

from __future__ import annotations

import asyncio
import os
from datetime import date

# Must be set before app modules build settings / the engine
os.environ["DATABASE_DSN"] = "sqlite+aiosqlite://"
os.environ["TIMEZONE"] = "UTC"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.api.deps import get_today
from app.db.base import Base
from app.db.session import get_db
from app.main import app

# Wednesday of 2024-W12
TODAY = date(2024, 3, 20)


@pytest.fixture
def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)

    async def create_all():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(create_all())
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture
def session_maker(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def seed(session_maker):
    """Insert ORM objects directly: seed(User(...), WorkoutLog(...), ...)."""

    def _seed(*objects):
        async def add_all():
            async with session_maker() as session:
                session.add_all(objects)
                await session.commit()

        asyncio.run(add_all())

    return _seed


@pytest.fixture
def client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    yield TestClient(app)
    app.dependency_overrides.clear()
