"""
Type definitions for jupiter_swap
"""

from .common import Route, SwapResponse, TokenBalance, TokensObject
from .orders import Amount, BuyConfig, SellConfig
from .solana_tokens import (
    SOL_MINT,
    TOKEN_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    SOLANA_TOKEN_MINTS,
    symbol_for_mint,
)

__all__ = [
    "Route",
    "SwapResponse",
    "TokenBalance",
    "TokensObject",
    "Amount",
    "BuyConfig",
    "SellConfig",
    "SOL_MINT",
    "TOKEN_PROGRAM_ID",
    "TOKEN_2022_PROGRAM_ID",
    "SOLANA_TOKEN_MINTS",
    "symbol_for_mint",
]
