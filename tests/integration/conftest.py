"""Integration test fixtures with an in-memory database."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from payroll_audit.api.app import create_app
from payroll_audit.api.dependencies import get_db_session
from payroll_audit.calculators.rules import RuleTableProvider
from payroll_audit.config import Settings
from payroll_audit.models import Base

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

EMPLOYEE_PAYLOAD = {
    "employee_id": "E001",
    "name": "Asha Rao",
    "department": "Engineering",
    "location": "Mumbai",
    "salary": 80000,
    "bonus": 10000,
    "deductions": 5000,
}


def employee_payload(**overrides) -> dict:
    return {**EMPLOYEE_PAYLOAD, **overrides}


@pytest.fixture
def test_settings(rules_file: Path) -> Settings:
    return Settings(
        database_url=TEST_DATABASE_URL,
        tax_rules_path=str(rules_file),
        engine_version="test",
        host="127.0.0.1",
        port=8000,
        debug=False,
        log_level="WARNING",
        history_min_records=3,
        history_window=6,
    )


@pytest_asyncio.fixture
async def test_engine():
    """One connection shared by every session so the in-memory schema persists."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Get database session for service tests."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def app(test_settings: Settings, session_factory) -> FastAPI:
    app = create_app(
        test_settings,
        rules_provider=RuleTableProvider(test_settings.tax_rules_path),
    )

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    return app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
