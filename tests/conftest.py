"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import os

# Settings are validated at import time, so defaults must be in place first.
os.environ.setdefault("POSTGRES_USER", "user")
os.environ.setdefault("POSTGRES_PASSWORD", "pass")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_PORT", "5432")
os.environ.setdefault("POSTGRES_DB", "travel_content")
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault("REDIS_PORT", "6379")
os.environ.setdefault("REDIS_DB", "0")
os.environ.setdefault("OPENAI_API_KEY", "test_key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_STORAGE_URL", "memory://")

from collections.abc import AsyncIterator, Iterator  # noqa: E402
from pathlib import Path  # noqa: E402
from types import MappingProxyType  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tests.fakes import FakeLLMClient  # noqa: E402
from travel_content.core import config  # noqa: E402
from travel_content.core.rate_limit import limiter  # noqa: E402
from travel_content.db.base import Base  # noqa: E402
from travel_content.main import create_app  # noqa: E402

# Database fixtures (function-scoped, one SQLite file per test)


@pytest_asyncio.fixture(scope="function")
async def sqlite_engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Creates a throwaway SQLite database with every table."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'cache.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_maker(sqlite_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Creates a session maker bound to the throwaway database."""
    return async_sessionmaker(sqlite_engine, class_=AsyncSession, expire_on_commit=False)


# Application fixtures


@pytest.fixture(scope="function")
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture(scope="function")
def app(fake_llm: FakeLLMClient) -> Iterator[FastAPI]:
    """Creates a FastAPI app wired to the fake LLM client.

    Rate limit counters are shared across app instances, so they are
    reset around every test.
    """
    config.settings.environment = "test"
    limiter.reset()
    fastapi_app = create_app(llm_client=fake_llm)
    yield fastapi_app
    limiter.reset()


@pytest.fixture(scope="function")
def override_services(app: FastAPI) -> Any:
    """Returns a helper that swaps named application services for fakes."""

    def override(**replacements: Any) -> None:
        services = dict(app.state.services)
        services.update(replacements)
        app.state.services = MappingProxyType(services)

    return override


@pytest.fixture(scope="function")
def http_client(app: FastAPI) -> TestClient:
    """Creates a synchronous http client."""
    return TestClient(app)
