"""Holder enumeration: every SPL token account for a mint via getProgramAccounts."""

from loguru import logger

from src.analysis.models import HolderRecord
from src.parsers.exceptions import MalformedDataError
from src.parsers.solana_rpc.client import SolanaRpcClient, parse_token_account
from src.parsers.solana_rpc.constants import (
    TOKEN_ACCOUNT_MINT_OFFSET,
    TOKEN_ACCOUNT_SIZE,
    TOKEN_PROGRAM_ID,
)


def holder_filters(mint: str) -> list[dict]:
    """Token-account size filter + mint equality at the layout's mint offset."""
    return [
        {"dataSize": TOKEN_ACCOUNT_SIZE},
        {"memcmp": {"offset": TOKEN_ACCOUNT_MINT_OFFSET, "bytes": mint}},
    ]


def decode_holder(entry: object, mint: str) -> HolderRecord | None:
    """Decode one program account into a HolderRecord.

    Returns None for zero balances. Raises MalformedDataError for entries
    that do not look like a token account of ``mint``.
    """
    account = parse_token_account(entry)
    if account.mint != mint:
        raise MalformedDataError(f"foreign mint {account.mint[:12]} in {account.address[:12]}")
    amount = account.ui_amount
    if amount < 0:
        raise MalformedDataError(f"negative amount in {account.address[:12]}")
    if amount == 0:
        return None
    return HolderRecord(address=account.address, amount=amount, owner=account.owner)


async def enumerate_holders(rpc: SolanaRpcClient, mint: str) -> list[HolderRecord]:
    """All non-zero holders of ``mint`` in RPC enumeration order.

    Raises UpstreamQueryError if the query itself fails; individual
    malformed entries are logged and skipped.
    """
    accounts = await rpc.get_program_accounts(TOKEN_PROGRAM_ID, holder_filters(mint))

    holders: list[HolderRecord] = []
    malformed = 0
    for entry in accounts:
        try:
            record = decode_holder(entry, mint)
        except MalformedDataError as e:
            malformed += 1
            logger.debug(f"[HOLDERS] Skipping entry for {mint[:12]}: {e}")
            continue
        if record is not None:
            holders.append(record)

    if malformed:
        logger.warning(
            f"[HOLDERS] {mint[:12]}: excluded {malformed}/{len(accounts)} malformed accounts"
        )
    logger.debug(f"[HOLDERS] {mint[:12]}: {len(holders)} holders of {len(accounts)} accounts")
    return holders
