"""Shared test fixtures."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from src.analysis.models import LaunchEvent
from src.models.base import Base
from tests.factories import CREATOR, MINT


@pytest.fixture()
def launch_event() -> LaunchEvent:
    return LaunchEvent(
        signature="sig_launch_aaaaaaaaaaaaaaaaaaaaaaaaaa",
        creator=CREATOR,
        base_mint=MINT,
        base_decimals=6,
        base_liquidity_amount=Decimal("800000000"),
        timestamp=datetime(2026, 3, 1, 12, 0, tzinfo=UTC),
    )


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine per test; tables created up front."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'launches.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()
