"""Data types for the holder-distribution pipeline and launch records."""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class HolderRecord:
    """One token account holding a non-zero balance of a mint."""

    address: str  # token account
    amount: Decimal  # decimal-normalized
    owner: str = ""


@dataclass(frozen=True)
class HolderShare:
    """HolderRecord with its share of observed supply."""

    address: str
    amount: Decimal
    percentage: Decimal
    owner: str = ""


@dataclass(frozen=True)
class DistributionSnapshot:
    """Holder balances normalized against the sum of all observed balances."""

    total_supply: Decimal
    holders: tuple[HolderShare, ...] = ()

    @property
    def is_empty(self) -> bool:
        """No eligible holders: concentration is undetermined, not 0%."""
        return self.total_supply == 0 or not self.holders

    @property
    def holder_count(self) -> int:
        return len(self.holders)


@dataclass(frozen=True)
class ConcentrationResult:
    top_n_percentage: Decimal
    n: int
    determined: bool  # False = no holder data, top_n_percentage is a placeholder 0


@dataclass(frozen=True)
class BundledHoldingsResult:
    total_bundled_amount: Decimal
    bundled_percentage: Decimal
    bundled_wallets: tuple[HolderShare, ...]
    threshold: Decimal


class EventState(Enum):
    DETECTED = "detected"
    ENRICHING = "enriching"
    ASSEMBLED = "assembled"
    DELIVERED = "delivered"
    FAILED = "failed"


class LaunchEvent(BaseModel):
    """New Raydium pool detected on-chain."""

    signature: str
    creator: str
    base_mint: str
    base_decimals: int = 0
    base_liquidity_amount: Decimal = ZERO
    timestamp: datetime

    model_config = {"frozen": True}


class BundledWallet(BaseModel):
    address: str
    owner: str = ""
    amount: Decimal
    percentage: Decimal


class ConcentrationSummary(BaseModel):
    top_n: int
    top_n_percentage: Decimal = ZERO
    determined: bool = False


class BundledSummary(BaseModel):
    threshold_pct: Decimal
    total_bundled_amount: Decimal = ZERO
    bundled_percentage: Decimal = ZERO
    bundled_wallets: list[BundledWallet] = []


class AnalysisRecord(BaseModel):
    """Merged per-launch output handed to the persistence sink.

    ``failed_branches`` lists enrichment branches that were replaced by their
    default, so a defaulted 0/False is never mistaken for a real one.
    """

    signature: str
    creator: str
    base_mint: str
    base_decimals: int
    base_liquidity_amount: Decimal
    timestamp: datetime

    risk_flag: bool | None = None  # None = unknown
    risk_score: int | None = None
    developer_holding_percentage: Decimal = ZERO
    developer_has_sold: bool = False

    holder_count: int = 0
    total_supply: Decimal = ZERO
    concentration: ConcentrationSummary
    bundled_holdings: BundledSummary

    failed_branches: list[str] = []
    analyzed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_partial(self) -> bool:
        return bool(self.failed_branches)
