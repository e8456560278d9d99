"""Shared fixtures and utilities for tests."""

import os

# Settings are read at import time, so the environment must be set first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["APP_ENV"] = "test"
os.environ["JSON_LOGS"] = "false"
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-min-32-chars-long-for-security")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("ACCESS_TOKEN_EXPIRE_MINUTES", "60")

from functools import lru_cache
from itertools import count

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import database.models  # noqa: F401
from api.dependencies import get_notification_dispatcher
from api.main import app
from api.services.notifications import NotificationDispatcher
from core.security import create_access_token, hash_password
from database.engine import Base, get_db
from database.models.jobs import Job, JobStatus
from database.models.users import User, UserRole

TEST_PASSWORD = "secret123"

_emails = count(1)


@lru_cache(maxsize=1)
def _password_hash() -> str:
    return hash_password(TEST_PASSWORD)


# ==================== Database ===================== #
@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def dispatcher(session_factory):
    return NotificationDispatcher(session_factory)


# ==================== HTTP client ===================== #
@pytest.fixture
async def client(session_factory, dispatcher):
    """HTTP client against the app, wired to the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ==================== Factories ===================== #
@pytest.fixture
def make_user(db_session):
    """Create a user; returns the persisted `User`."""

    async def _make(role: UserRole = UserRole.SEEKER, email: str = None) -> User:
        user = User(
            email=email or f"user{next(_emails)}@example.com",
            password_hash=_password_hash(),
            role=role,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest.fixture
def make_job(db_session):
    """Create a job posted by `owner`."""

    async def _make(owner: User, **overrides) -> Job:
        values = {
            "title": "Backend Engineer",
            "description": "Build and run APIs",
            "company": "Acme",
            "location": "Berlin",
            "salary_min": 50000,
            "salary_max": 70000,
            "status": JobStatus.ACTIVE,
        }
        values.update(overrides)
        job = Job(**values, posted_by_id=owner.id, application_ids=[])
        db_session.add(job)
        await db_session.commit()
        return job

    return _make


def _bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role.value)}"}


@pytest.fixture
def auth_headers():
    """Builds the bearer header for a user."""
    return _bearer


@pytest.fixture
async def recruiter(make_user):
    return await make_user(UserRole.RECRUITER)


@pytest.fixture
async def seeker(make_user):
    return await make_user(UserRole.SEEKER)


@pytest.fixture
async def admin(make_user):
    return await make_user(UserRole.ADMIN)
