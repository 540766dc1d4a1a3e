"""
AppBackend — Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   Services run against a fresh in-memory SQLite database per test
       (aiosqlite + StaticPool so every session sees the same connection);
       HTTP tests drive the FastAPI app through httpx's ASGITransport with
       `get_db_session` overridden to use that database.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: AsyncMock session, for failure paths
    ├── db_engine:       in-memory database with every table created
    ├── db_session:      AsyncSession bound to db_engine
    ├── signer:          CredentialSigner with the test secret
    ├── make_user:       factory inserting a User row
    ├── make_userend:    factory inserting a UserEnd row
    ├── make_resource:   factory inserting any owned resource row
    └── test_client:     httpx AsyncClient for endpoint tests
"""

import os

# Settings are read at import time: configure before importing appbackend
os.environ["APPBACKEND_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["APPBACKEND_JWT_SECRET"] = "test-secret-not-for-production-0123456789"
os.environ["APPBACKEND_LOG_LEVEL"] = "WARNING"

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from appbackend.database import Base, get_db_session
from appbackend.models import User, UserEnd
from appbackend.security import CredentialSigner, hash_password
from appbackend.services.identity import Identity

TEST_SECRET = os.environ["APPBACKEND_JWT_SECRET"]


# ══════════════════════════════════════════════════════════════════════════
# Mocks
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    AsyncMock standing in for AsyncSession.

    Usage:
        mock_db_session.commit.side_effect = OperationalError(...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def signer():
    return CredentialSigner(TEST_SECRET)


@pytest.fixture
def make_user(db_session):
    """Inserts a user; returns the row."""

    async def _make(nickname: str = "alice", password: str = "s3cret") -> User:
        user = User(id=uuid.uuid4(), nickname=nickname, password=hash_password(password))
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest.fixture
def make_userend(db_session):
    async def _make(user: User) -> UserEnd:
        userend = UserEnd(id=uuid.uuid4(), user_id=user.id)
        db_session.add(userend)
        await db_session.commit()
        return userend

    return _make


@pytest.fixture
def make_resource(db_session):
    """
    Inserts any owned resource row directly, bypassing the pipeline.

    Usage:
        box = await make_resource(Box, owner, device_id=device.id)
    """

    async def _make(model, owner, **columns):
        row = model(id=uuid.uuid4(), user_id=owner.id, **columns)
        db_session.add(row)
        await db_session.commit()
        return row

    return _make


@pytest.fixture
def identity_of():
    def _identity(user: User, userend: UserEnd = None) -> Identity:
        return Identity(user_id=user.id, userend_id=userend.id if userend else None)

    return _identity


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    httpx AsyncClient talking to a fresh app bound to the test database.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from appbackend.main import create_app

    app = create_app()

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def bearer(signer):
    """Authorization header for a user (and optionally a device) credential."""

    def _header(user: User, userend: UserEnd = None) -> dict:
        claims = {"userID": str(user.id)}
        if userend is not None:
            claims["userEndID"] = str(userend.id)
        return {"Authorization": f"Bearer {signer.sign(claims)}"}

    return _header
