import os
from typing import Any, AsyncGenerator, Callable, Dict
from unittest.mock import AsyncMock
from uuid import uuid4

# Settings are read at import time; point them at an in-memory database.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("REDIS_URL", "")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from leadintake.core.cache import CacheService  # noqa: E402
from leadintake.core.database import get_db  # noqa: E402
from leadintake.dependencies import (  # noqa: E402
    get_email_client,
    get_email_settings,
    get_redis_client,
)
from leadintake.main import app  # noqa: E402
from leadintake.models import Base  # noqa: E402
from leadintake.services.email_client import (  # noqa: E402
    EmailSendResult,
    EmailSettings,
    ResendEmailClient,
)


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine with the schema created from the ORM."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def email_settings() -> EmailSettings:
    return EmailSettings(
        api_key="re_test_key",
        from_email="leads@example.com",
        sender_name="Netic",
        booking_url="https://book.example.com/book",
    )


@pytest.fixture
def email_client() -> AsyncMock:
    """A configured transport whose sends always succeed."""
    client = AsyncMock(spec=ResendEmailClient)
    client.is_configured = True
    client.send = AsyncMock(
        return_value=EmailSendResult(success=True, message_id="re_msg_123")
    )
    return client


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Return an ``AsyncMock`` that behaves like ``redis.asyncio.Redis``."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock()
    redis.setex = AsyncMock()
    redis.delete = AsyncMock()
    redis.ping = AsyncMock()
    return redis


@pytest.fixture
def mock_cache(mock_redis) -> CacheService:
    """Return a ``CacheService`` backed by the mock Redis client."""
    return CacheService(redis_client=mock_redis)


@pytest_asyncio.fixture
async def async_client(
    session_factory, email_client, email_settings
) -> AsyncGenerator[AsyncClient, None]:
    """Yield an ``httpx.AsyncClient`` wired to the app and the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_redis_client():
        return None

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis_client] = override_get_redis_client
    app.dependency_overrides[get_email_client] = lambda: email_client
    app.dependency_overrides[get_email_settings] = lambda: email_settings

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_payload() -> Callable[..., Dict[str, Any]]:
    """Factory for Angi payloads; keyword overrides replace top-level fields."""

    def _make(**overrides: Any) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "FirstName": "Jane",
            "LastName": "Doe",
            "PhoneNumber": "317-555-0100",
            "PostalAddress": {
                "AddressFirstLine": "12 Main St",
                "AddressSecondLine": "",
                "City": "Indianapolis",
                "State": "IN",
                "PostalCode": "46204",
            },
            "Email": "jane@example.com",
            "Source": "Angi",
            "Description": "Kitchen sink is leaking",
            "Category": "Plumbing",
            "Urgency": "This week",
            "CorrelationId": str(uuid4()),
            "ALAccountId": "AL-1001",
        }
        payload.update(overrides)
        return payload

    return _make
