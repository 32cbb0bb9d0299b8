"""
Pytest configuration and shared fixtures for testing.
"""
import os
from pathlib import Path

# Settings are read at import time; provide test values before importing proftest
_TEST_DB = Path(__file__).parent / "test.db"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TEST_DB}")
os.environ.setdefault("DEBUG", "False")

from typing import AsyncGenerator  # noqa: E402
from contextlib import asynccontextmanager  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from httpx import ASGITransport  # noqa: E402

from proftest.models import Base, get_db, get_session_factory, User  # noqa: E402
from proftest.models import models as orm  # noqa: E402
from proftest.main import app  # noqa: E402
from proftest.core.security import create_access_token  # noqa: E402


@asynccontextmanager
async def _test_lifespan(app):
    """No-op lifespan for tests."""
    yield


# Neutralize the production lifespan on the singleton app
app.router.lifespan_context = _test_lifespan


# Sync engine for fixtures, path relative to this file so the .db lands
# inside tests/ regardless of the working directory.
SQLALCHEMY_DATABASE_URL = f"sqlite:///{_TEST_DB}"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Async engine (aiosqlite) on the same file so sync fixtures create data
# visible to async endpoint overrides. NullPool: TestClient and pytest-asyncio
# run different event loops, so connections must not be shared between them.
ASYNC_SQLALCHEMY_DATABASE_URL = f"sqlite+aiosqlite:///{_TEST_DB}"

async_test_engine = create_async_engine(
    ASYNC_SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=NullPool,
)
AsyncTestingSessionLocal = async_sessionmaker(
    async_test_engine, class_=AsyncSession, expire_on_commit=False
)


async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncTestingSessionLocal() as session:
        yield session


def override_get_session_factory() -> async_sessionmaker[AsyncSession]:
    return AsyncTestingSessionLocal


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database dependency overrides.

    Both the request session (get_db) and the factory used for concurrent
    pass counts point at the test database.
    """
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = override_get_session_factory
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def asgi_transport(db_session):
    """
    httpx transport that routes requests straight into the app.

    Used to point the session ApiClient at the real API without a server.
    """
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = override_get_session_factory
    yield ASGITransport(app=app)
    app.dependency_overrides.clear()


@pytest.fixture
def test_user(db_session):
    """
    Create a test user in the database.
    """
    user = User(
        email="test@example.com",
        first_name="Test",
        last_name="User",
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def other_user(db_session):
    """A second user, for pass counts across users."""
    user = User(email="other@example.com", first_name="Other", last_name="User")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def access_token(test_user):
    return create_access_token({"user_id": test_user.id})


@pytest.fixture
def auth_headers(access_token):
    """
    Create authentication headers for test user.
    """
    return {"Authorization": f"Bearer {access_token}"}


def make_thinking_test(**overrides):
    """
    Build a four-dimension test scored by ``dimension_sum``.

    One question per dimension with answers from 0 to 10, so answering
    ``[10, 5, 8, 2]`` scores Logic 10, Memory 5, Speed 8, Creativity 2.
    """
    data = dict(
        name="Thinking styles",
        icon="/icons/thinking.png",
        type="personality",
        short_desc="How do you think?",
        long_desc="Find out which thinking styles you rely on most.",
        instruction="Answer every question from 0 to 10.",
        questions=[
            {"text": "I enjoy solving puzzles.", "dimension": 0, "max": 10},
            {"text": "I remember phone numbers easily.", "dimension": 1, "max": 10},
            {"text": "I finish tasks before others.", "dimension": 2, "max": 10},
            {"text": "I invent new ways of doing things.", "dimension": 3, "max": 10},
        ],
        thinking_types=["Logic", "Memory", "Speed", "Creativity"],
        description=[
            "Reasoning step by step",
            "Holding on to details",
            "Working quickly",
            "Producing original ideas",
        ],
        levels=["Low", "Medium", "High", "Very high"],
        scorer="dimension_sum",
    )
    data.update(overrides)
    return data


@pytest.fixture
def sample_test(db_session):
    """
    Create a four-dimension test in the database.
    """
    test = orm.Test(**make_thinking_test())
    db_session.add(test)
    db_session.commit()
    db_session.refresh(test)
    return test


@pytest.fixture
def catalog(db_session):
    """
    Create three tests in the database, in ID order.
    """
    tests = [
        orm.Test(**make_thinking_test(name="Thinking styles")),
        orm.Test(**make_thinking_test(name="Learning styles", type="learning")),
        orm.Test(**make_thinking_test(name="Work styles", type="career")),
    ]
    for test in tests:
        db_session.add(test)
    db_session.commit()
    for test in tests:
        db_session.refresh(test)
    return tests


@pytest.fixture
def add_completion(db_session):
    """
    Factory fixture recording a completion of ``test`` by ``user``.
    """

    def _add(user, test, answers=None, result=None):
        completion = orm.TestCompletion(
            user_id=user.id,
            test_id=test.id,
            answers=answers or [10, 5, 8, 2],
            result=result or [{"level": 0, "score": 0}] * len(test.thinking_types),
        )
        db_session.add(completion)
        db_session.commit()
        db_session.refresh(completion)
        return completion

    return _add


@pytest.fixture
def async_session_factory(db_session):
    """Async session factory bound to the test database."""
    return AsyncTestingSessionLocal
