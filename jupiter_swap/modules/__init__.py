"""
Functional modules for jupiter_swap
"""

from .swap import SwapModule, convert_to_integer, finalize_transaction
from .wallet import WalletModule
from .expiry import recover_expired_transaction, is_expired_timeout, TIMEOUT_MARKER

__all__ = [
    "SwapModule",
    "convert_to_integer",
    "finalize_transaction",
    "WalletModule",
    "recover_expired_transaction",
    "is_expired_timeout",
    "TIMEOUT_MARKER",
]
