"""
Known Solana mints and programs

Symbols here are only used to label balances; swaps always work on mint addresses.
"""

from typing import Dict


SOL_MINT = "So11111111111111111111111111111111111111112"

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"

# Solana token mints (keys are uppercase for case-insensitive lookup)
SOLANA_TOKEN_MINTS: Dict[str, str] = {
    "SOL": SOL_MINT,
    "USDC": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    "USDT": "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB",
    "BONK": "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",
    "JUP": "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN",
    "RAY": "4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R",
    "MSOL": "mSoLzYCxHdYgdzU16g5QSh3i5K3z3KZK7ytfqcJm7So",
    "JITOSOL": "J1toso1uCk3RLmjorhTtrVwY9HJ7X8V9yYac6Y7kGCPn",
    "PYTH": "HZ1JovNiVvGrGNiiYvEozEVgZ58xaU3RKwX8eACQBCt3",
    "WIF": "EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm",
}

# Reverse mapping mint -> symbol
SOLANA_MINT_SYMBOLS: Dict[str, str] = {mint: symbol for symbol, mint in SOLANA_TOKEN_MINTS.items()}


def symbol_for_mint(mint: str) -> str:
    """Return the known symbol for a mint, or empty string"""
    return SOLANA_MINT_SYMBOLS.get(mint, "")
