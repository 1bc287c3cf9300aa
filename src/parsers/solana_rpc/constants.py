"""Solana program IDs and account layout constants."""

# SPL Token program (legacy, not Token2022)
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"

# SPL token account layout: 165 bytes, mint pubkey at [0:32], owner at [32:64]
TOKEN_ACCOUNT_SIZE = 165
TOKEN_ACCOUNT_MINT_OFFSET = 0
