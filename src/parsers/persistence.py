"""Persistence sinks for AnalysisRecords (append-only)."""

import asyncio
import json
from pathlib import Path
from typing import Protocol

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.analysis.models import AnalysisRecord
from src.models.base import Base
from src.models.launch import LaunchAnalysis


class RecordSink(Protocol):
    async def store(self, record: AnalysisRecord) -> None: ...

    async def close(self) -> None: ...


class JsonLinesSink:
    """One JSON object per line; duplicates by signature are kept."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _append(self, line: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")

    async def store(self, record: AnalysisRecord) -> None:
        line = json.dumps(record.model_dump(mode="json"), ensure_ascii=False)
        async with self._lock:
            await asyncio.to_thread(self._append, line)
        logger.debug(f"[SINK] {record.signature[:16]} → {self._path}")

    async def close(self) -> None:
        return None


def record_to_row(record: AnalysisRecord) -> LaunchAnalysis:
    """Map a pydantic AnalysisRecord onto the launch_analyses table."""
    wallets = record.model_dump(mode="json")["bundled_holdings"]["bundled_wallets"]
    return LaunchAnalysis(
        signature=record.signature,
        creator=record.creator,
        base_mint=record.base_mint,
        base_decimals=record.base_decimals,
        base_liquidity_amount=record.base_liquidity_amount,
        launched_at=record.timestamp,
        risk_flag=record.risk_flag,
        risk_score=record.risk_score,
        dev_holds_pct=record.developer_holding_percentage,
        dev_has_sold=record.developer_has_sold,
        holders_count=record.holder_count,
        top_n=record.concentration.top_n,
        top_n_holders_pct=record.concentration.top_n_percentage,
        concentration_determined=record.concentration.determined,
        bundled_amount=record.bundled_holdings.total_bundled_amount,
        bundled_pct=record.bundled_holdings.bundled_percentage,
        bundled_wallets=wallets,
        failed_branches=list(record.failed_branches),
        analyzed_at=record.analyzed_at,
    )


class DatabaseSink:
    """Inserts each record as a new launch_analyses row."""

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        self._engine = engine
        self._session_factory = session_factory

    async def init(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def store(self, record: AnalysisRecord) -> None:
        async with self._session_factory() as session:
            session.add(record_to_row(record))
            await session.commit()
        logger.debug(f"[SINK] {record.signature[:16]} → launch_analyses")

    async def close(self) -> None:
        await self._engine.dispose()
