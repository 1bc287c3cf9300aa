"""Tests for holder distribution."""

from decimal import Decimal

from src.analysis.distribution import distribute
from src.analysis.models import HolderRecord


def _records(*pairs: tuple[str, str]) -> list[HolderRecord]:
    return [HolderRecord(address=a, amount=Decimal(v)) for a, v in pairs]


class TestDistribute:
    def test_percentages_of_observed_supply(self) -> None:
        snapshot = distribute(_records(("A", "60"), ("B", "30"), ("C", "10")))
        assert snapshot.total_supply == Decimal("100")
        assert [h.percentage for h in snapshot.holders] == [60, 30, 10]
        assert [h.address for h in snapshot.holders] == ["A", "B", "C"]

    def test_percentages_sum_to_100(self) -> None:
        snapshot = distribute(
            _records(("A", "1"), ("B", "1"), ("C", "1"), ("D", "0.000001"), ("E", "7.3"))
        )
        total = sum(h.percentage for h in snapshot.holders)
        assert abs(total - 100) < Decimal("1e-20")

    def test_total_supply_is_sum_not_ledger_supply(self) -> None:
        snapshot = distribute(_records(("A", "2.5"), ("B", "7.5")))
        assert snapshot.total_supply == Decimal("10")
        assert snapshot.holders[0].percentage == 25
        assert snapshot.holders[1].percentage == 75

    def test_empty_records(self) -> None:
        snapshot = distribute([])
        assert snapshot.total_supply == 0
        assert snapshot.holders == ()
        assert snapshot.is_empty
        assert snapshot.holder_count == 0

    def test_idempotent(self) -> None:
        records = _records(("A", "3"), ("B", "7"), ("C", "11"))
        assert distribute(records) == distribute(records)

    def test_owner_carried_through(self) -> None:
        snapshot = distribute([HolderRecord(address="acc", amount=Decimal("5"), owner="wallet")])
        assert snapshot.holders[0].owner == "wallet"
        assert snapshot.holders[0].percentage == 100
        assert not snapshot.is_empty
