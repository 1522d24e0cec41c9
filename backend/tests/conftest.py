"""
Pytest fixtures for test database, client, users and resources.

Runs against a throwaway SQLite file by default; point TEST_DATABASE_URL at
a PostgreSQL database to exercise the exclusion constraint path as well.
Tables are created and dropped around every test. Redis is disabled.
"""

import os

TEST_DATABASE_URL = os.environ.get(
    "TEST_DATABASE_URL", "sqlite+aiosqlite:///./test_resource_booking.db"
)
# Must be set before the application modules read their settings.
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["REDIS_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "test"

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from resource_booking.main import app
from resource_booking.db.base import Base
from resource_booking.db.session import AsyncSessionLocal, engine, get_db
from resource_booking.core.security import create_access_token, hash_password
from resource_booking.models import Booking, Resource, User, UserRole


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Pooled connections belong to this test's event loop
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _make_user(db: AsyncSession, username: str, role: UserRole) -> User:
    user = User(
        email=f"{username}@campus.example.com",
        username=username,
        hashed_password=hash_password("testpassword123"),
        role=role.value,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def _headers(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "admin", UserRole.ADMIN)


@pytest_asyncio.fixture
async def organizer(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "organizer", UserRole.ORGANIZER)


@pytest_asyncio.fixture
async def other_organizer(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "organizer2", UserRole.ORGANIZER)


@pytest_asyncio.fixture
async def participant(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "participant", UserRole.PARTICIPANT)


@pytest_asyncio.fixture
async def admin_headers(admin_user: User) -> dict:
    return _headers(admin_user)


@pytest_asyncio.fixture
async def organizer_headers(organizer: User) -> dict:
    return _headers(organizer)


@pytest_asyncio.fixture
async def other_organizer_headers(other_organizer: User) -> dict:
    return _headers(other_organizer)


@pytest_asyncio.fixture
async def participant_headers(participant: User) -> dict:
    return _headers(participant)


async def _make_resource(db: AsyncSession, name: str, **overrides) -> Resource:
    resource = Resource(name=name, type="room", capacity=40, **overrides)
    db.add(resource)
    await db.commit()
    await db.refresh(resource)
    return resource


@pytest_asyncio.fixture
async def manual_room(db_session: AsyncSession) -> Resource:
    """Room whose bookings wait for an admin."""
    return await _make_resource(db_session, "Seminar Room A", auto_approve=False)


@pytest_asyncio.fixture
async def auto_room(db_session: AsyncSession) -> Resource:
    """Room whose bookings are approved on creation."""
    return await _make_resource(
        db_session, "Study Room B", auto_approve=True, requires_approval=False
    )


@pytest_asyncio.fixture
async def closed_hall(db_session: AsyncSession) -> Resource:
    return await _make_resource(db_session, "Main Hall", is_available=False)


@pytest.fixture
def add_booking(db_session: AsyncSession):
    """Insert a booking row directly, bypassing the lifecycle manager."""

    async def _add(resource: Resource, requester: User, start, end, status="approved") -> Booking:
        booking = Booking(
            resource_id=resource.id,
            requester_id=requester.id,
            start_time=start,
            end_time=end,
            status=status,
        )
        db_session.add(booking)
        await db_session.commit()
        await db_session.refresh(booking)
        return booking

    return _add
