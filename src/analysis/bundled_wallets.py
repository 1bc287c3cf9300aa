"""Bundled-wallet grouping: holders above a significance threshold.

Each account holding at least ``threshold`` percent of observed supply is
treated as part of one combined cluster. Ranking is by absolute amount,
since the signal is exposure rather than relative share.
"""

from decimal import Decimal

from src.analysis.models import (
    HUNDRED,
    ZERO,
    BundledHoldingsResult,
    DistributionSnapshot,
)

DEFAULT_THRESHOLD_PCT = 1.0


def bundled_holdings(
    snapshot: DistributionSnapshot, threshold: float | Decimal = DEFAULT_THRESHOLD_PCT
) -> BundledHoldingsResult:
    limit = Decimal(str(threshold))
    significant = [h for h in snapshot.holders if h.percentage >= limit]
    ranked = tuple(sorted(significant, key=lambda h: h.amount, reverse=True))

    total = sum((h.amount for h in ranked), ZERO)
    if snapshot.total_supply > 0:
        pct = total / snapshot.total_supply * HUNDRED
    else:
        pct = ZERO

    return BundledHoldingsResult(
        total_bundled_amount=total,
        bundled_percentage=pct,
        bundled_wallets=ranked,
        threshold=limit,
    )
