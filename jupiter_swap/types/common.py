"""
Common type definitions
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict


# Jupiter quote response, passed through to the swap endpoint untouched
Route = Dict[str, Any]

# Jupiter swap response: {"swapTransaction": "<base64>", ...}
SwapResponse = Dict[str, Any]


@dataclass(frozen=True)
class TokenBalance:
    """
    Wallet balance of one token

    Attributes:
        mint: Token mint address (base58)
        balance: Balance in UI units
        decimals: Number of decimal places
        raw_amount: Balance in base units
        symbol: Known symbol, empty when the mint is not in the registry
    """
    mint: str
    balance: Decimal
    decimals: int
    raw_amount: int = 0
    symbol: str = ""

    def __str__(self) -> str:
        return f"{self.symbol or self.mint}: {self.balance}"


# Balances keyed by mint address
TokensObject = Dict[str, TokenBalance]
