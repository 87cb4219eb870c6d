"""Shared test fixtures."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from src.models.base import Base
from src.models.transaction import VerifiedSender
from src.models.user import User, Wallet
from src.parsers.alchemy.models import NormalizedTransfer


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Fresh SQLite file per test with NullPool to avoid loop mismatch.

    The enrichment engine opens its own sessions, so fixtures commit
    instead of relying on a single rolled-back session.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}",
        echo=False,
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


class Seeder:
    """Commits reference rows so every session sees them."""

    def __init__(self, factory: async_sessionmaker[AsyncSession]) -> None:
        self._factory = factory

    async def _add(self, obj):
        async with self._factory() as session:
            session.add(obj)
            await session.commit()
        return obj

    async def user(self, email: str = "alice@example.com") -> User:
        return await self._add(User(email=email, name=email.split("@")[0]))

    async def wallet(
        self,
        user: User,
        address: str = "0x1111111111111111111111111111111111111111",
        chain_id: int = 1,
        label: str | None = None,
    ) -> Wallet:
        return await self._add(
            Wallet(user_id=user.id, address=address, chain_id=chain_id, label=label)
        )

    async def sender(
        self,
        address: str,
        chain_id: int = 1,
        company_name: str = "Acme Corp",
        official_label: str = "Acme Payroll",
        is_active: bool = True,
    ) -> VerifiedSender:
        return await self._add(
            VerifiedSender(
                address=address,
                chain_id=chain_id,
                company_name=company_name,
                official_label=official_label,
                is_active=is_active,
            )
        )


@pytest_asyncio.fixture(scope="function")
async def seed(session_factory: async_sessionmaker[AsyncSession]) -> Seeder:
    return Seeder(session_factory)


def _make_transfer(
    tx_hash: str = "0xaaa",
    *,
    chain_id: int = 1,
    from_address: str = "0x2222222222222222222222222222222222222222",
    to_address: str = "0x1111111111111111111111111111111111111111",
    amount: str = "1000000000000000000",
    token_symbol: str = "ETH",
    token_decimals: int = 18,
    token_address: str = "0x0000000000000000000000000000000000000000",
    timestamp: datetime | None = None,
    category: str = "external",
) -> NormalizedTransfer:
    return NormalizedTransfer(
        tx_hash=tx_hash,
        chain_id=chain_id,
        from_address=from_address,
        to_address=to_address,
        amount=amount,
        token_address=token_address,
        token_symbol=token_symbol,
        token_decimals=token_decimals,
        timestamp=timestamp or datetime(2026, 3, 1, 12, 0, tzinfo=UTC),
        category=category,
    )


@pytest.fixture
def make_transfer():
    return _make_transfer
