"""Raydium pool-creation transaction → LaunchEvent."""

from datetime import UTC, datetime

from loguru import logger

from src.analysis.models import ZERO, LaunchEvent
from src.parsers.solana_rpc.models import ParsedTransaction


def parse_launch_event(
    tx: ParsedTransaction,
    *,
    amm_authority: str,
    quote_mint: str,
) -> LaunchEvent | None:
    """Extract launch details from a parsed pool-creation transaction.

    The base token is the first post-balance owned by the AMM authority
    whose mint is not the quote mint. Returns None for failed transactions
    or when no base vault balance is present.
    """
    if tx.err is not None:
        logger.debug(f"[LAUNCH] {tx.signature[:16]} failed on-chain, skipping")
        return None
    if not tx.account_keys:
        logger.debug(f"[LAUNCH] {tx.signature[:16]} has no account keys")
        return None

    base = next(
        (
            b
            for b in tx.post_token_balances
            if b.owner == amm_authority and b.mint != quote_mint
        ),
        None,
    )
    if base is None:
        logger.debug(f"[LAUNCH] {tx.signature[:16]} has no base vault balance")
        return None

    if tx.block_time:
        timestamp = datetime.fromtimestamp(tx.block_time, tz=UTC)
    else:
        timestamp = datetime.now(UTC)

    return LaunchEvent(
        signature=tx.signature,
        creator=tx.account_keys[0],
        base_mint=base.mint,
        base_decimals=base.decimals,
        base_liquidity_amount=base.ui_amount if base.ui_amount is not None else ZERO,
        timestamp=timestamp,
    )
