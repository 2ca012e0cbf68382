"""
Infrastructure layer for jupiter_swap

Provides:
- RpcClient: Solana JSON-RPC wrapper
- SignatureSubscriptions: one-shot signature listeners
- Signer: Transaction signing abstraction (local keypair)
"""

from .rpc import RpcClient, RpcClientConfig
from .subscriptions import SignatureSubscriptions, reached_commitment
from .solana_signer import (
    Signer,
    LocalSigner,
    create_signer,
)

__all__ = [
    "RpcClient",
    "RpcClientConfig",
    "SignatureSubscriptions",
    "reached_commitment",
    "Signer",
    "LocalSigner",
    "create_signer",
]
