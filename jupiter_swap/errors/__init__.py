"""
Error definitions for jupiter_swap
"""

from .exceptions import (
    ErrorCode,
    SwapAdapterError,
    RpcError,
    ApiError,
    MintNotFound,
    InsufficientFunds,
    TransactionError,
    SignerError,
    ConfigurationError,
)

__all__ = [
    "ErrorCode",
    "SwapAdapterError",
    "RpcError",
    "ApiError",
    "MintNotFound",
    "InsufficientFunds",
    "TransactionError",
    "SignerError",
    "ConfigurationError",
]
