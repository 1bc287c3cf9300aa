"""Builders for upstream payloads used across tests."""

MINT = "MintBase1111111111111111111111111111111111"
CREATOR = "Creator111111111111111111111111111111111111"
AMM_AUTHORITY = "5Q544fKrFoe6tsEbD7S8EmxGTJYAKtTVhAW5Q5pge4j1"
WSOL = "So11111111111111111111111111111111111111112"


def token_account_entry(
    pubkey: str,
    amount: int,
    *,
    mint: str = MINT,
    decimals: int = 0,
    owner: str = "",
) -> dict:
    """Build a getProgramAccounts(jsonParsed) entry for an SPL token account."""
    return {
        "pubkey": pubkey,
        "account": {
            "data": {
                "program": "spl-token",
                "parsed": {
                    "type": "account",
                    "info": {
                        "mint": mint,
                        "owner": owner or f"owner_{pubkey}",
                        "tokenAmount": {"amount": str(amount), "decimals": decimals},
                    },
                },
                "space": 165,
            },
        },
    }


def token_balance(
    mint: str, owner: str, amount: int, *, decimals: int = 6, index: int = 0
) -> dict:
    """Build a pre/post token balance entry as returned in transaction meta."""
    ui_amount = amount / 10**decimals if amount else None
    return {
        "accountIndex": index,
        "mint": mint,
        "owner": owner,
        "uiTokenAmount": {
            "amount": str(amount),
            "decimals": decimals,
            "uiAmount": ui_amount,
            "uiAmountString": str(ui_amount or 0),
        },
    }


def raw_transaction(
    *,
    account_keys: list[str],
    pre: list[dict] | None = None,
    post: list[dict] | None = None,
    err: object = None,
    block_time: int | None = 1_772_366_400,
) -> dict:
    """Build a getTransaction(jsonParsed) result."""
    return {
        "slot": 300_000_000,
        "blockTime": block_time,
        "meta": {
            "err": err,
            "preTokenBalances": pre or [],
            "postTokenBalances": post or [],
        },
        "transaction": {
            "message": {
                "accountKeys": [
                    {"pubkey": key, "signer": i == 0, "writable": True}
                    for i, key in enumerate(account_keys)
                ],
            },
        },
    }
