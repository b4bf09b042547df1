"""
Pytest configuration and fixtures.

Store-backed tests run against an in-memory SQLite database shared by
every session of a test through a StaticPool.
"""
from typing import Any, AsyncGenerator, Callable, Coroutine
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from crypto_payments.api.main import app
from crypto_payments.core.payment_service import PaymentService
from crypto_payments.database.connection import get_db
from crypto_payments.database.models import Base, Payment, PaymentStatus
from crypto_payments.database.repository import PaymentRepository
from crypto_payments.integrations.qr_encoder import QRCodeEncoder
from crypto_payments.monitoring.metrics import PaymentMetrics

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], Any]:
    """Create a fresh in-memory database and return its session factory."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    yield factory

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, Any]:
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def insert_payment(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Coroutine[Any, Any, Payment]]:
    """Factory inserting a committed payment row."""

    async def _create(**fields: Any) -> Payment:
        fields.setdefault("status", PaymentStatus.PENDING.value)
        payment = Payment(**fields)
        async with session_factory() as session:
            session.add(payment)
            await session.commit()
        return payment

    return _create


@pytest.fixture
def mock_repository() -> AsyncMock:
    return AsyncMock(spec=PaymentRepository)


@pytest.fixture
def mock_metrics() -> MagicMock:
    return MagicMock(spec=PaymentMetrics)


@pytest.fixture
def mock_qr_encoder() -> AsyncMock:
    encoder = AsyncMock(spec=QRCodeEncoder)
    encoder.encode.return_value = b"\x89PNG fake image"
    return encoder


@pytest.fixture
def payment_service(
    mock_repository: AsyncMock, mock_metrics: MagicMock, mock_qr_encoder: AsyncMock
) -> PaymentService:
    """PaymentService wired to mocks."""
    return PaymentService(
        repository=mock_repository,
        metrics=mock_metrics,
        qr_encoder=mock_qr_encoder,
        payment_base_url="https://example.com",
    )


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, Any]:
    """Create test HTTP client backed by the in-memory database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, Any]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
