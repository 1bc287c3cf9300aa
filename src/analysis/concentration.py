"""Top-N holder concentration."""

from decimal import Decimal

from loguru import logger

from src.analysis.models import ZERO, ConcentrationResult, DistributionSnapshot, HolderShare

DEFAULT_TOP_N = 10


def _has_valid_percentage(holder: HolderShare) -> bool:
    pct = holder.percentage
    return isinstance(pct, Decimal) and pct.is_finite()


def top_n_concentration(snapshot: DistributionSnapshot, n: int = DEFAULT_TOP_N) -> Decimal:
    """Sum of the n largest holder percentages.

    Ties keep enumeration order (stable sort). Returns 0 when the snapshot
    has no valid holders.
    """
    valid = [h for h in snapshot.holders if _has_valid_percentage(h)]
    if not valid or n <= 0:
        return ZERO

    ranked = sorted(valid, key=lambda h: h.percentage, reverse=True)
    return sum((h.percentage for h in ranked[:n]), ZERO)


def analyze_concentration(
    snapshot: DistributionSnapshot, n: int = DEFAULT_TOP_N
) -> ConcentrationResult:
    if snapshot.is_empty:
        logger.debug("[CONCENTRATION] No holder data, concentration undetermined")
        return ConcentrationResult(top_n_percentage=ZERO, n=n, determined=False)
    return ConcentrationResult(
        top_n_percentage=top_n_concentration(snapshot, n),
        n=n,
        determined=True,
    )
