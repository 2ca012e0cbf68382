"""
SwapClient and library entry points

The entry points take plain configuration values, open their own
connection, and close it before returning:

    buy_token(BuyConfig(...))            -> signature
    sell_token(SellConfig(...))          -> signature
    get_tokens_balances(rpc, wallet)     -> {mint: TokenBalance}
    get_token_balance(rpc, wallet, mint) -> Decimal
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping, Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from solders.keypair import Keypair

from .infra import RpcClient, RpcClientConfig, Signer, create_signer
from .protocols.jupiter import JupiterAPI
from .types import BuyConfig, SellConfig, TokensObject
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def create_connection(rpc_endpoint: str, commitment: str = "confirmed") -> RpcClient:
    """
    Open a connection handle to a Solana RPC endpoint

    Raises:
        ConfigurationError: Endpoint missing or client cannot be created
    """
    if not rpc_endpoint:
        raise ConfigurationError.missing("RPC endpoint")
    try:
        return RpcClient(rpc_endpoint, config=RpcClientConfig(commitment=commitment))
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Error creating connection: {e}") from e


class SwapClient:
    """
    Entry point bundling RPC, signer and Jupiter API

    Usage:
        client = SwapClient(
            rpc_url="https://api.mainnet-beta.solana.com",
            private_key="<base58 secret key>",
        )
        sig = client.swap.buy(token_mint, Decimal("0.1"), slippage=1)
        balance = client.wallet.get_balance_of_token(client.pubkey, token_mint)
        client.close()
    """

    def __init__(
        self,
        rpc_url: str,
        private_key: Optional[str] = None,
        keypair: Optional["Keypair"] = None,
        keypair_path: Optional[str] = None,
        api: Optional[JupiterAPI] = None,
    ):
        """
        Initialize SwapClient

        Args:
            rpc_url: RPC endpoint URL
            private_key: Optional base58 secret key
            keypair: Optional Keypair for local signing
            keypair_path: Optional path to keypair file
            api: Optional Jupiter API client
        """
        self._rpc = create_connection(rpc_url)
        self._signer: Optional[Signer] = None
        if keypair is not None or private_key or keypair_path:
            self._signer = create_signer(
                keypair=keypair,
                private_key=private_key,
                keypair_path=keypair_path,
            )
        self._api = api

        self._wallet: Optional["WalletModule"] = None
        self._swap: Optional["SwapModule"] = None

    @property
    def rpc(self) -> RpcClient:
        return self._rpc

    @property
    def signer(self) -> Signer:
        if self._signer is None:
            self._signer = create_signer()
        return self._signer

    @property
    def pubkey(self) -> str:
        """Owner's public key"""
        return self.signer.pubkey

    @property
    def wallet(self) -> "WalletModule":
        """Wallet module for balance queries"""
        if self._wallet is None:
            from .modules.wallet import WalletModule
            self._wallet = WalletModule(self._rpc)
        return self._wallet

    @property
    def swap(self) -> "SwapModule":
        """Swap module for buy/sell"""
        if self._swap is None:
            from .modules.swap import SwapModule
            if self._api is None:
                self._api = JupiterAPI()
            self._swap = SwapModule(self._rpc, self.signer, api=self._api, wallet=self.wallet)
        return self._swap

    def close(self):
        """Close RPC and HTTP clients"""
        self._rpc.close()
        if self._api is not None:
            self._api.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def _require(value: Any, message: str) -> None:
    if not value:
        raise ConfigurationError(message)


def buy_token(config: Union[BuyConfig, Mapping[str, Any]]) -> str:
    """
    Buy a token with SOL

    Args:
        config: BuyConfig or mapping with the same (or upper-case) keys

    Returns:
        Transaction signature
    """
    if not isinstance(config, BuyConfig):
        config = BuyConfig.from_dict(config)

    _require(config.rpc_endpoint, "No RPC endpoint specified")
    _require(config.wallet_private_key, "No wallet private key specified")
    _require(config.address_of_token_to_buy, "No token address specified")
    _require(config.amount_of_solana_to_spend, "You need to specify AMOUNT_OF_SOLANA_TO_SPEND")

    with SwapClient(config.rpc_endpoint, private_key=config.wallet_private_key) as client:
        logger.info("Connection established")
        logger.info(f"Wallet fetched: {client.pubkey}")
        logger.info(f"Trying to buy token using {config.amount_of_solana_to_spend} SOL...")

        return client.swap.buy(
            config.address_of_token_to_buy,
            config.amount_of_solana_to_spend,
            config.slippage,
            compute_unit_limit=config.compute_unit_limit,
        )


def sell_token(config: Union[SellConfig, Mapping[str, Any]]) -> str:
    """
    Sell a token in the wallet for SOL

    Args:
        config: SellConfig or mapping with the same (or upper-case) keys

    Returns:
        Transaction signature
    """
    if not isinstance(config, SellConfig):
        config = SellConfig.from_dict(config)

    if not config.sell_all and not config.amount_of_token_to_sell:
        raise ConfigurationError(
            "You need to specify AMOUNT_OF_TOKEN_TO_SELL if SELL_ALL is false"
        )
    _require(config.rpc_endpoint, "No RPC endpoint specified")
    _require(config.wallet_private_key, "No wallet private key specified")
    _require(config.address_of_token_to_sell, "No token address specified")

    with SwapClient(config.rpc_endpoint, private_key=config.wallet_private_key) as client:
        logger.info("Connection established")
        logger.info(f"Wallet fetched: {client.pubkey}")
        logger.info(
            f"Selling {'all' if config.sell_all else config.amount_of_token_to_sell} "
            f"of {config.address_of_token_to_sell}..."
        )

        return client.swap.sell(
            config.address_of_token_to_sell,
            config.slippage,
            sell_all=config.sell_all,
            amount_of_token_to_sell=config.amount_of_token_to_sell,
            owner=client.pubkey,
            compute_unit_limit=config.compute_unit_limit,
        )


def get_tokens_balances(rpc_endpoint: str, wallet_public_key: str) -> TokensObject:
    """
    Get all token balances of a wallet

    Args:
        rpc_endpoint: RPC endpoint to connect to
        wallet_public_key: Wallet to inspect

    Returns:
        Balances keyed by mint
    """
    _require(wallet_public_key, "No wallet public key specified")
    _require(rpc_endpoint, "No RPC endpoint specified")

    with SwapClient(rpc_endpoint) as client:
        logger.info("Connection established")
        logger.info("Fetching tokens...")
        return client.wallet.get_account_tokens(wallet_public_key)


def get_token_balance(rpc_endpoint: str, wallet_public_key: str, token_address: str) -> Decimal:
    """
    Get a wallet's balance of one token

    Args:
        rpc_endpoint: RPC endpoint to connect to
        wallet_public_key: Wallet to inspect
        token_address: Token mint address

    Returns:
        Balance in UI units
    """
    _require(token_address, "No token address specified")
    _require(wallet_public_key, "No wallet public key specified")
    _require(rpc_endpoint, "No RPC endpoint specified")

    with SwapClient(rpc_endpoint) as client:
        logger.info("Connection established")
        logger.info("Fetching token balance...")
        return client.wallet.get_balance_of_token(wallet_public_key, token_address)
