"""
jupiter_swap - Buy and sell Solana tokens through the Jupiter aggregator

Provides:
- buy_token / sell_token: SOL <-> token swaps signed with a local keypair
- get_tokens_balances / get_token_balance: wallet token balances
- SwapClient: object interface over the same operations
"""

from .client import (
    SwapClient,
    create_connection,
    buy_token,
    sell_token,
    get_tokens_balances,
    get_token_balance,
)
from .types import (
    BuyConfig,
    SellConfig,
    TokenBalance,
    TokensObject,
    SOL_MINT,
)
from .errors import (
    SwapAdapterError,
    RpcError,
    ApiError,
    MintNotFound,
    InsufficientFunds,
    TransactionError,
    SignerError,
    ConfigurationError,
    ErrorCode,
)
from .modules import SwapModule, WalletModule, convert_to_integer, recover_expired_transaction

__all__ = [
    # Entry points
    "SwapClient",
    "create_connection",
    "buy_token",
    "sell_token",
    "get_tokens_balances",
    "get_token_balance",
    # Types
    "BuyConfig",
    "SellConfig",
    "TokenBalance",
    "TokensObject",
    "SOL_MINT",
    # Errors
    "SwapAdapterError",
    "RpcError",
    "ApiError",
    "MintNotFound",
    "InsufficientFunds",
    "TransactionError",
    "SignerError",
    "ConfigurationError",
    "ErrorCode",
    # Modules
    "SwapModule",
    "WalletModule",
    "convert_to_integer",
    "recover_expired_transaction",
]

__version__ = "1.0.0"
