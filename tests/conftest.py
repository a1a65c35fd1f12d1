"""
Shared fixtures: in-memory SQLite, mock senders and an app client.
"""
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from settlement_sam import models  # noqa: F401
from settlement_sam.config import Settings
from settlement_sam.database import get_session
from settlement_sam.main import app
from settlement_sam.repositories.factory import Repositories
from settlement_sam.services.email_service import MockEmailService, set_email_service
from settlement_sam.services.integrations.sheets import MockSheetsProvider, set_sheets_provider


class FakeClock:
    """Callable clock that tests move by hand."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        SECRET_KEY="test-secret",
        DATASTORE="sql",
        DATABASE_URL="sqlite+aiosqlite://",
        SMTP_HOST="",
        STRIPE_SECRET_KEY="sk_test_123",
        STRIPE_WEBHOOK_SECRET="whsec_test",
    )


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 3, 15, 0, 0))


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def repos(session):
    return Repositories.for_session(session)


@pytest.fixture
def email_service():
    service = MockEmailService()
    set_email_service(service)
    yield service
    set_email_service(None)


@pytest.fixture
def sheets_provider():
    provider = MockSheetsProvider()
    set_sheets_provider(provider)
    yield provider
    set_sheets_provider(None)


@pytest_asyncio.fixture
async def law_client(repos):
    return await repos.clients.create({
        "name": "Dana Reyes",
        "firm": "Reyes Injury Law",
        "email": "intake@reyeslaw.com",
        "sheets_id": "sheet-abc",
    })


@pytest_asyncio.fixture
async def lead(repos):
    return await repos.leads.create({
        "name": "Jordan Smith",
        "phone": "5551234567",
        "carrier": "vtext.com",
        "injury_type": "fracture",
        "hospitalized": True,
        "lost_wages": 6000,
        "score": 40,
        "tier": "COLD",
        "estimate_low": 26000,
        "estimate_high": 81000,
        "verified": True,
        "source": "widget",
    })


@pytest_asyncio.fixture
async def client(session_factory, email_service, sheets_provider):
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
