"""
Pytest configuration and fixtures for reminder engine tests.
"""
import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy import event
from sqlalchemy.pool import StaticPool

# Set test environment BEFORE importing app modules
os.environ["TESTING"] = "1"

# Clear any cached settings to ensure test config is used
from athletics.config import get_settings
get_settings.cache_clear()

from athletics.database import Base, get_db, set_sqlite_pragmas
from athletics.main import app
from athletics.services.claims import ClaimProtocol
from athletics.services.directory import ScheduleDirectory
from athletics.services.ledger import SqlLedgerStore
from athletics.services.notifier import NotificationService
from athletics.services.scheduler import NotificationScheduler
from tests.fakes import (
    FrozenClock,
    InMemoryLedgerStore,
    FakeDirectory,
    FakeEmailSender,
    FakePushSender,
)
from tests.factories import NOW, TZ


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture
def ledger_store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def claims(ledger_store: InMemoryLedgerStore, clock: FrozenClock) -> ClaimProtocol:
    return ClaimProtocol(ledger_store, clock=clock)


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory()


@pytest.fixture
def email_sender() -> FakeEmailSender:
    return FakeEmailSender()


@pytest.fixture
def push_sender() -> FakePushSender:
    return FakePushSender()


@pytest.fixture
def notification_service(directory, claims, email_sender, push_sender, clock) -> NotificationService:
    return NotificationService(
        directory=directory,
        claims=claims,
        email_sender=email_sender,
        push_sender=push_sender,
        tz=TZ,
        clock=clock,
    )


@pytest_asyncio.fixture(scope="function")
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Fresh in-memory database for each test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def file_session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """File-backed database with the production pragmas; sessions get their own connections."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'reminders.db'}")
    event.listen(engine.sync_engine, "connect", set_sqlite_pragmas)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(
    session_factory,
    clock: FrozenClock,
    email_sender: FakeEmailSender,
    push_sender: FakePushSender,
) -> AsyncGenerator[AsyncClient, None]:
    """Test client backed by the per-test database and fake senders."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.notification_scheduler = NotificationScheduler(
        NotificationService(
            directory=ScheduleDirectory(session_factory),
            claims=ClaimProtocol(SqlLedgerStore(session_factory), clock=clock),
            email_sender=email_sender,
            push_sender=push_sender,
            tz=TZ,
            clock=clock,
        ),
        tz=TZ,
        clock=clock,
    )

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
    del app.state.notification_scheduler
