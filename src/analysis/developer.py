"""Developer wallet checks: remaining allocation and sell history.

Both checks raise UpstreamQueryError on RPC failure; the orchestrator
substitutes defaults.
"""

from decimal import Decimal

from loguru import logger

from src.analysis.models import HUNDRED, ZERO
from src.parsers.exceptions import MalformedDataError
from src.parsers.solana_rpc.client import SolanaRpcClient
from src.parsers.solana_rpc.models import ParsedTransaction, TokenBalance

DEFAULT_SIGNATURE_LIMIT = 50


async def developer_holding_percentage(
    rpc: SolanaRpcClient, developer: str, mint: str
) -> Decimal:
    """Share of mint supply held across all of the developer's token accounts."""
    accounts = await rpc.get_token_accounts_by_owner(developer, mint)
    balance = sum((a.ui_amount for a in accounts if a.mint == mint), ZERO)

    supply = await rpc.get_token_supply(mint)
    total = supply.ui_amount
    if total <= 0:
        return ZERO

    pct = balance / total * HUNDRED
    logger.debug(f"[DEV] {developer[:8]} holds {pct:.2f}% of {mint[:12]}")
    return pct


def _balance_of(balances: list[TokenBalance], owner: str, mint: str) -> Decimal:
    for b in balances:
        if b.owner == owner and b.mint == mint:
            return b.ui_amount if b.ui_amount is not None else ZERO
    return ZERO


def sold_in_transaction(tx: ParsedTransaction, developer: str, mint: str) -> bool:
    """True if ``developer``'s balance of ``mint`` decreased in a successful tx."""
    if tx.err is not None:
        return False
    pre = _balance_of(tx.pre_token_balances, developer, mint)
    post = _balance_of(tx.post_token_balances, developer, mint)
    return pre > post


async def developer_has_sold(
    rpc: SolanaRpcClient,
    developer: str,
    mint: str,
    *,
    limit: int = DEFAULT_SIGNATURE_LIMIT,
) -> bool:
    """Scan the developer's recent transactions for a balance decrease of ``mint``."""
    signatures = await rpc.get_signatures_for_address(developer, limit=limit)

    for sig in signatures:
        if sig.err is not None:
            continue
        try:
            tx = await rpc.get_transaction(sig.signature)
        except MalformedDataError as e:
            logger.debug(f"[DEV] Skipping {sig.signature[:16]}: {e}")
            continue
        if tx is not None and sold_in_transaction(tx, developer, mint):
            logger.info(f"[DEV] {developer[:8]} sold {mint[:12]} in {sig.signature[:16]}")
            return True

    return False
