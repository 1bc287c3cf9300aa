"""Holder distribution: percentages of observed supply."""

from collections.abc import Sequence

from src.analysis.models import HUNDRED, ZERO, DistributionSnapshot, HolderRecord, HolderShare


def distribute(records: Sequence[HolderRecord]) -> DistributionSnapshot:
    """Build a DistributionSnapshot from enumerated holders.

    total_supply is the sum of observed balances, so percentages are only
    computed once every record has been summed. Zero supply yields an empty
    snapshot (undetermined concentration).
    """
    total_supply = sum((r.amount for r in records), ZERO)
    if total_supply <= 0:
        return DistributionSnapshot(total_supply=ZERO, holders=())

    holders = tuple(
        HolderShare(
            address=r.address,
            amount=r.amount,
            percentage=r.amount / total_supply * HUNDRED,
            owner=r.owner,
        )
        for r in records
    )
    return DistributionSnapshot(total_supply=total_supply, holders=holders)
