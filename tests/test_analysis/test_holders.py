"""Tests for holder enumeration."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.analysis.holders import decode_holder, enumerate_holders, holder_filters
from src.parsers.exceptions import MalformedDataError, UpstreamQueryError
from src.parsers.solana_rpc.constants import TOKEN_PROGRAM_ID
from tests.factories import MINT, token_account_entry


def _rpc(accounts: list | None = None, error: Exception | None = None) -> MagicMock:
    rpc = MagicMock()
    if error is not None:
        rpc.get_program_accounts = AsyncMock(side_effect=error)
    else:
        rpc.get_program_accounts = AsyncMock(return_value=accounts or [])
    return rpc


class TestHolderFilters:
    def test_size_and_mint_filters(self) -> None:
        filters = holder_filters(MINT)
        assert {"dataSize": 165} in filters
        assert {"memcmp": {"offset": 0, "bytes": MINT}} in filters


class TestDecodeHolder:
    def test_normalizes_decimals(self) -> None:
        record = decode_holder(token_account_entry("acc1", 1_500_000, decimals=6), MINT)
        assert record is not None
        assert record.amount == Decimal("1.5")
        assert record.address == "acc1"
        assert record.owner == "owner_acc1"

    def test_zero_balance_dropped(self) -> None:
        assert decode_holder(token_account_entry("acc1", 0, decimals=6), MINT) is None

    def test_foreign_mint_rejected(self) -> None:
        entry = token_account_entry("acc1", 100, mint="OtherMint")
        with pytest.raises(MalformedDataError):
            decode_holder(entry, MINT)

    def test_missing_fields_rejected(self) -> None:
        with pytest.raises(MalformedDataError):
            decode_holder({"pubkey": "acc1", "account": {"data": "AAAA"}}, MINT)

    def test_non_numeric_amount_rejected(self) -> None:
        entry = token_account_entry("acc1", 0)
        entry["account"]["data"]["parsed"]["info"]["tokenAmount"]["amount"] = "lots"
        with pytest.raises(MalformedDataError):
            decode_holder(entry, MINT)


class TestEnumerateHolders:
    @pytest.mark.asyncio
    async def test_queries_token_program_with_filters(self) -> None:
        rpc = _rpc([token_account_entry("acc1", 10)])
        await enumerate_holders(rpc, MINT)
        rpc.get_program_accounts.assert_awaited_once_with(TOKEN_PROGRAM_ID, holder_filters(MINT))

    @pytest.mark.asyncio
    async def test_returns_records_in_enumeration_order(self) -> None:
        rpc = _rpc([
            token_account_entry("acc1", 60),
            token_account_entry("acc2", 30),
            token_account_entry("acc3", 10),
        ])
        holders = await enumerate_holders(rpc, MINT)
        assert [h.address for h in holders] == ["acc1", "acc2", "acc3"]
        assert [h.amount for h in holders] == [60, 30, 10]

    @pytest.mark.asyncio
    async def test_excludes_zero_and_malformed(self) -> None:
        rpc = _rpc([
            token_account_entry("acc1", 60),
            token_account_entry("empty", 0),
            {"pubkey": "broken"},
            token_account_entry("foreign", 50, mint="OtherMint"),
            token_account_entry("acc2", 40),
        ])
        holders = await enumerate_holders(rpc, MINT)
        assert [h.address for h in holders] == ["acc1", "acc2"]

    @pytest.mark.asyncio
    async def test_no_accounts(self) -> None:
        assert await enumerate_holders(_rpc([]), MINT) == []

    @pytest.mark.asyncio
    async def test_upstream_error_propagates(self) -> None:
        rpc = _rpc(error=UpstreamQueryError("getProgramAccounts: HTTP 503"))
        with pytest.raises(UpstreamQueryError):
            await enumerate_holders(rpc, MINT)
        assert rpc.get_program_accounts.await_count == 1  # no retry here
