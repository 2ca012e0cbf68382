"""
Swap Module

Buys and sells tokens against SOL through Jupiter:
resolve mint decimals, scale the amount, quote, build, sign, broadcast,
then watch the signature until cleanup.
"""

from __future__ import annotations

import base64
import logging
from decimal import Decimal, ROUND_FLOOR
from typing import Any, Dict, Optional, TYPE_CHECKING

from ..types import Amount, SOL_MINT
from ..protocols.jupiter import JupiterAPI
from ..errors import (
    SwapAdapterError,
    InsufficientFunds,
    MintNotFound,
    TransactionError,
)
from ..config import config as global_config
from .expiry import RecoveryPolicy, is_expired_timeout, recover_expired_transaction
from .wallet import WalletModule

if TYPE_CHECKING:
    from ..infra import RpcClient, Signer

logger = logging.getLogger(__name__)


def convert_to_integer(amount: Amount, decimals: int) -> int:
    """
    Convert a UI amount to base units: floor(amount * 10^decimals)

    Floats go through their string form so 0.29 scales to 29, not 28.
    """
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    scaled = value * (Decimal(10) ** decimals)
    return int(scaled.to_integral_value(rounding=ROUND_FLOOR))


def finalize_transaction(
    swap_transaction: str,
    signer: "Signer",
    rpc: "RpcClient",
    skip_preflight: Optional[bool] = None,
    preflight_commitment: Optional[str] = None,
) -> str:
    """
    Sign and broadcast a Jupiter swap transaction

    Args:
        swap_transaction: Base64 serialized VersionedTransaction
        signer: Wallet signer
        rpc: RPC client
        skip_preflight: Skip preflight simulation (default from config)
        preflight_commitment: Preflight commitment (default from config)

    Returns:
        Transaction signature

    Raises:
        TransactionError: When decoding, signing or sending fails
    """
    if skip_preflight is None:
        skip_preflight = global_config.tx.skip_preflight
    if preflight_commitment is None:
        preflight_commitment = global_config.tx.preflight_commitment

    try:
        unsigned_tx = base64.b64decode(swap_transaction, validate=True)
        signed_tx, _ = signer.sign_transaction(unsigned_tx)
        txid = rpc.send_transaction(
            signed_tx,
            skip_preflight=skip_preflight,
            preflight_commitment=preflight_commitment,
        )
    except Exception as e:
        raise TransactionError.finalize_failed(e) from e

    logger.info(f"Transaction sent with txid: {txid}")
    return txid


class SwapModule:
    """
    SOL <-> token swaps via Jupiter

    Usage:
        swap = SwapModule(rpc, signer)

        # Spend 0.1 SOL on a token
        sig = swap.buy(token_mint, Decimal("0.1"), slippage=1)

        # Sell the whole balance
        sig = swap.sell(token_mint, slippage=1, sell_all=True)

    Errors starting with the expired-timeout marker are passed to
    ``expiry_policy``; pass ``expiry_policy=None`` to surface them as-is.
    """

    def __init__(
        self,
        rpc: "RpcClient",
        signer: "Signer",
        api: Optional[JupiterAPI] = None,
        wallet: Optional[WalletModule] = None,
        expiry_policy: Optional[RecoveryPolicy] = recover_expired_transaction,
        confirmation_commitment: Optional[str] = None,
        confirmation_wait: Optional[float] = None,
    ):
        """
        Initialize swap module

        Args:
            rpc: RPC client
            signer: Wallet signer
            api: Jupiter API client (created from config if None)
            wallet: Wallet module used by sell_all (created if None)
            expiry_policy: Recovery for timed-out transactions, None disables
            confirmation_commitment: Listener commitment (default from config)
            confirmation_wait: Seconds to wait on the listener (default from config)
        """
        self._rpc = rpc
        self._signer = signer
        self._api = api or JupiterAPI()
        self._wallet = wallet or WalletModule(rpc)
        self._expiry_policy = expiry_policy
        self._confirmation_commitment = (
            confirmation_commitment or global_config.tx.confirmation_commitment
        )
        self._confirmation_wait = (
            confirmation_wait if confirmation_wait is not None
            else global_config.tx.confirmation_wait
        )

    @property
    def api(self) -> JupiterAPI:
        return self._api

    def get_mint_decimals(self, mint: str) -> int:
        """
        Read decimals from the on-chain mint account

        Raises:
            MintNotFound: Account missing, not returned as parsed JSON,
                or not a mint account
        """
        account = self._rpc.get_parsed_account_info(mint)
        data = account.get("data") if account else None
        parsed = data.get("parsed") if isinstance(data, dict) else None
        if not isinstance(parsed, dict) or parsed.get("type") != "mint":
            raise MintNotFound(mint=mint)
        decimals = parsed.get("info", {}).get("decimals")
        if decimals is None:
            raise MintNotFound(mint=mint)
        return decimals

    def buy(
        self,
        address_of_token_in: str,
        amount_of_token_out: Amount,
        slippage: Amount,
        compute_unit_limit: Optional[int] = None,
    ) -> str:
        """
        Spend SOL on a token

        Args:
            address_of_token_in: Mint of the token to buy
            amount_of_token_out: SOL to spend, in UI units
            slippage: Slippage tolerance in percent
            compute_unit_limit: Optional compute-unit limit override

        Returns:
            Transaction signature
        """
        try:
            return self._swap(
                SOL_MINT,
                address_of_token_in,
                amount_of_token_out,
                slippage,
                compute_unit_limit,
            )
        except Exception as e:
            return self._handle_error(e)

    def sell(
        self,
        address_of_token_out: str,
        slippage: Amount,
        sell_all: bool = True,
        amount_of_token_to_sell: Optional[Amount] = None,
        owner: Optional[str] = None,
        compute_unit_limit: Optional[int] = None,
    ) -> str:
        """
        Sell a token for SOL

        Args:
            address_of_token_out: Mint of the token to sell
            slippage: Slippage tolerance in percent
            sell_all: Sell the wallet's whole balance of the token
            amount_of_token_to_sell: UI amount, used when sell_all is False
            owner: Wallet whose balance is queried (default: signer)
            compute_unit_limit: Optional compute-unit limit override

        Returns:
            Transaction signature
        """
        try:
            if sell_all:
                amount_of_token_to_sell = self._wallet.get_balance_of_token(
                    owner or self._signer.pubkey,
                    address_of_token_out,
                )

            if amount_of_token_to_sell is None or Decimal(str(amount_of_token_to_sell)) <= 0:
                raise InsufficientFunds.nothing_to_sell(
                    address_of_token_out,
                    amount_of_token_to_sell,
                )

            logger.info(f"Selling {amount_of_token_to_sell} of {address_of_token_out}")

            return self._swap(
                address_of_token_out,
                SOL_MINT,
                amount_of_token_to_sell,
                slippage,
                compute_unit_limit,
            )
        except Exception as e:
            return self._handle_error(e)

    def _swap(
        self,
        input_mint: str,
        output_mint: str,
        amount: Amount,
        slippage: Amount,
        compute_unit_limit: Optional[int],
    ) -> str:
        decimals = self.get_mint_decimals(input_mint)
        raw_amount = convert_to_integer(amount, decimals)

        quote = self._api.get_quote(input_mint, output_mint, raw_amount, slippage)

        swap_transaction = self._api.get_swap_transaction(
            quote,
            self._signer.pubkey,
            compute_unit_limit=compute_unit_limit,
        )

        txid = finalize_transaction(swap_transaction, self._signer, self._rpc)

        self._watch_confirmation(txid)
        return txid

    def _watch_confirmation(self, txid: str) -> None:
        """Register the signature listener and always remove it afterwards"""
        logger.info("Waiting for confirmation...")

        subscription_id = None
        try:
            subscription_id = self._rpc.on_signature(
                txid,
                self._log_confirmation,
                self._confirmation_commitment,
            )
            if self._confirmation_wait > 0:
                if not self._rpc.wait_for_signature(subscription_id, self._confirmation_wait):
                    raise TransactionError.expired_timeout(txid, self._confirmation_wait)
        finally:
            if subscription_id is not None:
                self._rpc.remove_signature_listener(subscription_id)

    @staticmethod
    def _log_confirmation(result: Dict[str, Any]) -> None:
        if result.get("err"):
            logger.error(f"Transaction failed: {result['err']}")
        else:
            logger.info("Transaction confirmed")

    def _handle_error(self, error: Exception) -> str:
        """Recover expired transactions, re-raise everything else normalized"""
        if self._expiry_policy is not None and is_expired_timeout(error):
            return self._expiry_policy(error, self._rpc)
        if isinstance(error, SwapAdapterError):
            raise error
        raise SwapAdapterError.wrap(error) from error
