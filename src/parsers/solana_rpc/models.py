"""Pydantic models for Solana JSON-RPC responses (jsonParsed encoding)."""

from decimal import Decimal

from pydantic import BaseModel


class TokenBalance(BaseModel):
    """Pre/post token balance entry from transaction meta."""

    account_index: int = 0
    mint: str
    owner: str = ""
    decimals: int = 0
    amount: int = 0  # raw base units
    ui_amount: Decimal | None = None  # None when the RPC omits it (zero balance)


class ParsedTransaction(BaseModel):
    """Subset of getTransaction(jsonParsed) used by launch detection."""

    signature: str
    slot: int = 0
    block_time: int | None = None  # unix
    err: dict | str | None = None  # non-None means failed
    account_keys: list[str] = []
    pre_token_balances: list[TokenBalance] = []
    post_token_balances: list[TokenBalance] = []


class SignatureInfo(BaseModel):
    """Transaction signature metadata from getSignaturesForAddress."""

    signature: str
    slot: int = 0
    block_time: int | None = None
    err: dict | str | None = None


class TokenAccount(BaseModel):
    """Parsed SPL token account."""

    address: str
    mint: str
    owner: str = ""
    amount: int = 0  # raw base units
    decimals: int = 0

    @property
    def ui_amount(self) -> Decimal:
        return Decimal(self.amount).scaleb(-self.decimals)


class TokenSupply(BaseModel):
    """Mint supply from getTokenSupply."""

    amount: int = 0
    decimals: int = 0

    @property
    def ui_amount(self) -> Decimal:
        return Decimal(self.amount).scaleb(-self.decimals)
