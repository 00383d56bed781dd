"""
Event Finance Manager - Test Configuration

Pytest fixtures and configuration.
"""

import os
from decimal import Decimal
from typing import AsyncGenerator, Callable, Dict
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

import eventfinance.models  # noqa: F401
from eventfinance.database import Base, get_async_session
from eventfinance.models.event import Event, EventStatus
from eventfinance.models.user import Organization, User, UserRole
from eventfinance.utils.security import create_access_token
from main import app


# In-memory SQLite by default, one database per test. Point TEST_DATABASE_URL
# at a PostgreSQL <db>_test database to exercise Numeric scale and CHECKs.
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")


def _engine_options(url: str) -> Dict[str, object]:
    if url.startswith("sqlite"):
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database and session for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        **_engine_options(TEST_DATABASE_URL),
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_maker() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ===========================================
# DATA FIXTURES
# ===========================================

@pytest_asyncio.fixture
async def test_organization(db_session: AsyncSession) -> Organization:
    """Create a test organization."""
    org = Organization(id=uuid4(), name="Test Organization")
    db_session.add(org)
    await db_session.commit()
    await db_session.refresh(org)
    return org


@pytest_asyncio.fixture
async def other_organization(db_session: AsyncSession) -> Organization:
    """A second tenant, for isolation checks."""
    org = Organization(id=uuid4(), name="Other Organization")
    db_session.add(org)
    await db_session.commit()
    await db_session.refresh(org)
    return org


async def _create_user(
    db_session: AsyncSession,
    organization: Organization,
    role: UserRole,
    email: str,
    full_name: str,
) -> User:
    user = User(
        id=uuid4(),
        email=email,
        full_name=full_name,
        role=role,
        organization_id=organization.id,
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession, test_organization: Organization) -> User:
    return await _create_user(
        db_session, test_organization, UserRole.ADMIN, "admin@example.com", "Ada Admin"
    )


@pytest_asyncio.fixture
async def manager_user(db_session: AsyncSession, test_organization: Organization) -> User:
    return await _create_user(
        db_session, test_organization, UserRole.EVENT_MANAGER, "manager@example.com", "Mo Manager"
    )


@pytest_asyncio.fixture
async def finance_user(db_session: AsyncSession, test_organization: Organization) -> User:
    return await _create_user(
        db_session, test_organization, UserRole.FINANCE, "finance@example.com", "Fi Finance"
    )


@pytest_asyncio.fixture
async def viewer_user(db_session: AsyncSession, test_organization: Organization) -> User:
    return await _create_user(
        db_session, test_organization, UserRole.VIEWER, "viewer@example.com", "Vi Viewer"
    )


@pytest_asyncio.fixture
async def outsider_user(db_session: AsyncSession, other_organization: Organization) -> User:
    return await _create_user(
        db_session, other_organization, UserRole.ADMIN, "outsider@example.com", "Out Sider"
    )


@pytest_asyncio.fixture
async def test_event(
    db_session: AsyncSession,
    test_organization: Organization,
    manager_user: User,
) -> Event:
    """Create an event with a 10,000 budget, created by the event manager."""
    event = Event(
        id=uuid4(),
        organization_id=test_organization.id,
        name="Annual Conference",
        venue="Main Hall",
        budget=Decimal("10000.00"),
        status=EventStatus.PLANNING,
        created_by_id=manager_user.id,
    )
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event


@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    """Build bearer headers for a user."""

    def _headers(user: User) -> Dict[str, str]:
        token = create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return _headers
