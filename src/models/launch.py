from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base


class LaunchAnalysis(Base):
    """One analysis record per detected launch. Append-only: duplicates allowed."""

    __tablename__ = "launch_analyses"

    id: Mapped[int] = mapped_column(primary_key=True)
    signature: Mapped[str] = mapped_column(String(128))
    creator: Mapped[str] = mapped_column(String(64))
    base_mint: Mapped[str] = mapped_column(String(64))
    base_decimals: Mapped[int] = mapped_column(Integer)
    base_liquidity_amount: Mapped[Decimal] = mapped_column(Numeric)
    launched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    risk_flag: Mapped[bool | None] = mapped_column(Boolean)
    risk_score: Mapped[int | None] = mapped_column(Integer)
    dev_holds_pct: Mapped[Decimal] = mapped_column(Numeric)
    dev_has_sold: Mapped[bool] = mapped_column(Boolean)

    holders_count: Mapped[int] = mapped_column(Integer)
    top_n: Mapped[int] = mapped_column(Integer)
    top_n_holders_pct: Mapped[Decimal] = mapped_column(Numeric)
    concentration_determined: Mapped[bool] = mapped_column(Boolean)
    bundled_amount: Mapped[Decimal] = mapped_column(Numeric)
    bundled_pct: Mapped[Decimal] = mapped_column(Numeric)
    bundled_wallets: Mapped[list] = mapped_column(JSON, default=list)

    failed_branches: Mapped[list] = mapped_column(JSON, default=list)
    analyzed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        Index("idx_launch_analyses_signature", "signature"),
        Index("idx_launch_analyses_mint", "base_mint"),
        Index("idx_launch_analyses_creator", "creator"),
    )
