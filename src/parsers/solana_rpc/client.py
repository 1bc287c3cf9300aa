"""Solana JSON-RPC client: holder, transaction and wallet queries.

Every call is a single attempt: failures surface as UpstreamQueryError and the
caller decides whether to retry. Malformed payloads surface as MalformedDataError.
"""

import asyncio
from decimal import Decimal
from typing import Any

import httpx
from loguru import logger

from src.parsers.exceptions import MalformedDataError, UpstreamQueryError
from src.parsers.rate_limiter import RateLimiter
from src.parsers.solana_rpc.models import (
    ParsedTransaction,
    SignatureInfo,
    TokenAccount,
    TokenBalance,
    TokenSupply,
)


class SolanaRpcClient:
    """Async HTTP client for Solana JSON-RPC."""

    def __init__(
        self,
        rpc_url: str,
        rate_limiter: RateLimiter | None = None,
        max_rps: float = 10.0,
        timeout: float = 30.0,
    ) -> None:
        self._rpc_url = rpc_url
        self._rate_limiter = rate_limiter or RateLimiter(max_rps)
        self._client = httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def _call(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        await self._rate_limiter.acquire()
        try:
            resp = await self._client.post(self._rpc_url, json=payload)
        except httpx.HTTPError as e:
            raise UpstreamQueryError(f"{method}: {type(e).__name__}: {e}") from e

        if resp.status_code != 200:
            raise UpstreamQueryError(f"{method}: HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamQueryError(f"{method}: invalid JSON body") from e

        if not isinstance(data, dict):
            raise UpstreamQueryError(f"{method}: unexpected response type {type(data).__name__}")
        if "error" in data:
            raise UpstreamQueryError(f"{method}: RPC error {data['error']}")
        return data.get("result")

    async def get_program_accounts(
        self, program_id: str, filters: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """Raw jsonParsed accounts owned by ``program_id`` matching ``filters``."""
        result = await self._call(
            "getProgramAccounts",
            [program_id, {"encoding": "jsonParsed", "filters": filters}],
        )
        if not isinstance(result, list):
            raise UpstreamQueryError("getProgramAccounts: result is not a list")
        return result

    async def get_transaction(self, signature: str) -> ParsedTransaction | None:
        """Parsed transaction, or None if the RPC has not indexed it yet."""
        result = await self._call(
            "getTransaction",
            [
                signature,
                {
                    "encoding": "jsonParsed",
                    "maxSupportedTransactionVersion": 0,
                    "commitment": "confirmed",
                },
            ],
        )
        if result is None:
            return None
        return _parse_transaction(signature, result)

    async def wait_for_transaction(
        self,
        signature: str,
        *,
        retries: int = 4,
        initial_delay: float = 2.0,
    ) -> ParsedTransaction | None:
        """Fetch a transaction that was just announced over the WebSocket.

        logsSubscribe delivers signatures before the RPC index is ready,
        so we wait ``initial_delay`` seconds before the first attempt and
        back off exponentially while the result is still missing.
        """
        await asyncio.sleep(initial_delay)
        delay = max(initial_delay, 1.0)
        last_error: UpstreamQueryError | None = None
        for attempt in range(retries):
            try:
                tx = await self.get_transaction(signature)
                if tx is not None:
                    return tx
            except UpstreamQueryError as e:
                last_error = e
                logger.debug(f"[RPC] getTransaction failed for {signature[:16]}: {e}")
            if attempt < retries - 1:
                await asyncio.sleep(delay)
                delay *= 2
        if last_error is not None:
            raise last_error
        return None

    async def get_token_accounts_by_owner(self, owner: str, mint: str) -> list[TokenAccount]:
        result = await self._call(
            "getTokenAccountsByOwner",
            [owner, {"mint": mint}, {"encoding": "jsonParsed"}],
        )
        if not isinstance(result, dict) or not isinstance(result.get("value"), list):
            raise UpstreamQueryError("getTokenAccountsByOwner: missing value list")

        accounts: list[TokenAccount] = []
        for entry in result["value"]:
            try:
                accounts.append(parse_token_account(entry))
            except MalformedDataError as e:
                logger.warning(f"[RPC] Skipping token account of {owner[:8]}: {e}")
        return accounts

    async def get_token_supply(self, mint: str) -> TokenSupply:
        result = await self._call("getTokenSupply", [mint])
        value = result.get("value") if isinstance(result, dict) else None
        if not isinstance(value, dict):
            raise UpstreamQueryError("getTokenSupply: missing value")
        try:
            return TokenSupply(amount=int(value["amount"]), decimals=int(value["decimals"]))
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedDataError(f"getTokenSupply: {e}") from e

    async def get_signatures_for_address(
        self, address: str, *, limit: int = 50
    ) -> list[SignatureInfo]:
        result = await self._call(
            "getSignaturesForAddress",
            [address, {"limit": min(limit, 1000)}],
        )
        if not isinstance(result, list):
            raise UpstreamQueryError("getSignaturesForAddress: result is not a list")
        return [
            SignatureInfo(
                signature=sig.get("signature", ""),
                slot=sig.get("slot", 0),
                block_time=sig.get("blockTime"),
                err=sig.get("err"),
            )
            for sig in result
            if isinstance(sig, dict) and sig.get("signature")
        ]


def parse_token_account(entry: Any) -> TokenAccount:
    """Decode one ``{pubkey, account: {data: {parsed: ...}}}`` entry."""
    try:
        info = entry["account"]["data"]["parsed"]["info"]
        token_amount = info["tokenAmount"]
        return TokenAccount(
            address=str(entry["pubkey"]),
            mint=str(info["mint"]),
            owner=str(info.get("owner", "")),
            amount=int(token_amount["amount"]),
            decimals=int(token_amount["decimals"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedDataError(f"token account: {type(e).__name__}: {e}") from e


def _parse_balance(data: dict) -> TokenBalance:
    ui = data.get("uiTokenAmount") or {}
    ui_amount = ui.get("uiAmount")
    return TokenBalance(
        account_index=data.get("accountIndex", 0),
        mint=data["mint"],
        owner=data.get("owner", ""),
        decimals=ui.get("decimals", 0),
        amount=int(ui.get("amount", 0)),
        ui_amount=Decimal(str(ui_amount)) if ui_amount is not None else None,
    )


def _parse_transaction(signature: str, data: Any) -> ParsedTransaction:
    """Parse raw getTransaction(jsonParsed) result."""
    try:
        meta = data.get("meta") or {}
        message = data["transaction"]["message"]
        account_keys = [
            key["pubkey"] if isinstance(key, dict) else str(key)
            for key in message.get("accountKeys", [])
        ]
        return ParsedTransaction(
            signature=signature,
            slot=data.get("slot", 0),
            block_time=data.get("blockTime"),
            err=meta.get("err"),
            account_keys=account_keys,
            pre_token_balances=[_parse_balance(b) for b in meta.get("preTokenBalances") or []],
            post_token_balances=[_parse_balance(b) for b in meta.get("postTokenBalances") or []],
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise MalformedDataError(f"getTransaction {signature[:16]}: {e}") from e
