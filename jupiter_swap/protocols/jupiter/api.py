"""
Jupiter API Client

REST API client for the Jupiter swap aggregator.
"""

import logging
from decimal import Decimal
from typing import Optional, Union

import httpx

from ...types import Route
from ...config import config as global_config
from ...errors import ApiError

logger = logging.getLogger(__name__)

QUOTE_ERROR = "Error fetching quote"
SWAP_ERROR = "Error getting swap transaction"


def slippage_to_bps(slippage: Union[Decimal, float, int]) -> int:
    """Convert a slippage percentage to basis points (1 -> 100)"""
    return int(Decimal(str(slippage)) * 100)


class JupiterAPI:
    """
    Jupiter REST API client

    Provides:
    - Swap quotes
    - Prebuilt swap transactions

    Usage:
        api = JupiterAPI()
        quote = api.get_quote(SOL_MINT, token_mint, 1_000_000_000, slippage=1)
        swap_tx_b64 = api.get_swap_transaction(quote, user_pubkey)
    """

    def __init__(
        self,
        timeout: float = None,
        quote_url: str = None,
        swap_url: str = None,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize Jupiter API client

        Args:
            timeout: Request timeout in seconds (default from config)
            quote_url: Quote API URL (default from config)
            swap_url: Swap API URL (default from config)
            http_client: Optional preconfigured httpx client
        """
        jupiter = global_config.jupiter
        self._timeout = timeout if timeout is not None else jupiter.timeout
        self._quote_url = quote_url if quote_url is not None else jupiter.quote_url
        self._swap_url = swap_url if swap_url is not None else jupiter.swap_url
        self._wrap_and_unwrap_sol = jupiter.wrap_and_unwrap_sol
        self._restrict_intermediate_tokens = jupiter.restrict_intermediate_tokens
        self._prioritization_fee_lamports = jupiter.prioritization_fee_lamports
        self._auto_multiplier = jupiter.auto_multiplier
        self._client: Optional[httpx.Client] = http_client

    @property
    def quote_url(self) -> str:
        return self._quote_url

    @property
    def swap_url(self) -> str:
        return self._swap_url

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client"""
        if self._client is None:
            self._client = httpx.Client(timeout=self._timeout)
        return self._client

    def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage: Union[Decimal, float, int],
    ) -> Route:
        """
        Get swap quote from Jupiter

        Args:
            input_mint: Mint of the token being sold
            output_mint: Mint of the token being bought
            amount: Input amount in base units
            slippage: Slippage tolerance in percent

        Returns:
            Quote response, passed to get_swap_transaction() unchanged

        Raises:
            ApiError: On non-2xx response or transport failure
        """
        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount),
            "slippageBps": slippage_to_bps(slippage),
        }
        logger.debug(f"Requesting Jupiter quote: {params}")

        try:
            response = self._get_client().get(self._quote_url, params=params)
        except httpx.HTTPError as e:
            raise ApiError(f"{QUOTE_ERROR}: {e}", original_error=e) from e

        if not response.is_success:
            raise ApiError.http_status(
                QUOTE_ERROR,
                response.status_code,
                response.reason_phrase,
                response.text,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ApiError.invalid_response(QUOTE_ERROR, f"invalid JSON ({e})") from e

    def get_swap_transaction(
        self,
        quote: Route,
        user_public_key: str,
        compute_unit_limit: Optional[int] = None,
    ) -> str:
        """
        Get serialized swap transaction from Jupiter

        Args:
            quote: Quote response from get_quote()
            user_public_key: Wallet public key (base58)
            compute_unit_limit: Optional compute-unit limit override

        Returns:
            Base64-encoded unsigned VersionedTransaction

        Raises:
            ApiError: On non-2xx response or missing swapTransaction
        """
        swap_request = {
            "quoteResponse": quote,
            "userPublicKey": user_public_key,
            "wrapAndUnwrapSol": self._wrap_and_unwrap_sol,
            "restrictIntermediateTokens": self._restrict_intermediate_tokens,
            "prioritizationFeeLamports": self._prioritization_fee_lamports,
            "autoMultiplier": self._auto_multiplier,
        }
        if compute_unit_limit:
            swap_request["computeUnitLimit"] = compute_unit_limit

        try:
            response = self._get_client().post(self._swap_url, json=swap_request)
        except httpx.HTTPError as e:
            raise ApiError(f"{SWAP_ERROR}: {e}", original_error=e) from e

        if not response.is_success:
            raise ApiError.http_status(
                SWAP_ERROR,
                response.status_code,
                response.reason_phrase,
                response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ApiError.invalid_response(SWAP_ERROR, f"invalid JSON ({e})") from e

        swap_transaction = data.get("swapTransaction")
        if not swap_transaction:
            raise ApiError.invalid_response(SWAP_ERROR, "no swapTransaction in response")

        return swap_transaction

    def close(self):
        """Close HTTP client"""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
