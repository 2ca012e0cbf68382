"""
RPC Client for Solana

Provides the JSON-RPC calls the swap flow needs:
- Parsed account lookups (mint decimals, token accounts)
- Raw transaction broadcast
- Signature status lookups
- Signature listeners (on_signature / remove_signature_listener)
"""

from __future__ import annotations

import base64
import logging
import threading
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass

import httpx

from ..errors import RpcError, ConfigurationError, ErrorCode
from ..config import config as global_config
from .subscriptions import SignatureSubscriptions

logger = logging.getLogger(__name__)


@dataclass
class RpcClientConfig:
    """
    RPC client runtime configuration

    Pulls defaults from the global config for any unset value.

    Usage:
        config = RpcClientConfig(timeout_seconds=60, commitment="finalized")
        client = RpcClient(endpoint, config=config)
    """
    timeout_seconds: float = None
    commitment: str = None
    status_poll_interval: float = None

    def __post_init__(self):
        """Apply defaults from global config for any unset values"""
        if self.timeout_seconds is None:
            self.timeout_seconds = global_config.rpc.timeout_seconds
        if self.commitment is None:
            self.commitment = global_config.rpc.commitment
        if self.status_poll_interval is None:
            self.status_poll_interval = global_config.tx.status_poll_interval


class RpcClient:
    """
    Solana JSON-RPC client

    Usage:
        rpc = RpcClient("https://api.mainnet-beta.solana.com")

        mint = rpc.get_parsed_account_info("So11111111111111111111111111111111111111112")
        sig = rpc.send_transaction(signed_tx_bytes)

        sub_id = rpc.on_signature(sig, print, "finalized")
        rpc.remove_signature_listener(sub_id)
    """

    def __init__(
        self,
        endpoint: str,
        config: Optional[RpcClientConfig] = None,
    ):
        """
        Initialize RPC client

        Args:
            endpoint: RPC endpoint URL
            config: RPC configuration options
        """
        if not endpoint:
            raise ConfigurationError.missing("RPC endpoint")

        self._endpoint = endpoint
        self._config = config or RpcClientConfig()
        self._client: Optional[httpx.Client] = None
        self._client_lock = threading.Lock()
        self._subscriptions: Optional[SignatureSubscriptions] = None
        self._closed = False

    @property
    def endpoint(self) -> str:
        """RPC endpoint URL"""
        return self._endpoint

    @property
    def commitment(self) -> str:
        """Default commitment level"""
        return self._config.commitment

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client (thread-safe)"""
        if self._client is None:
            with self._client_lock:
                if self._closed:
                    raise RpcError.client_closed(self._endpoint)
                if self._client is None:
                    self._client = httpx.Client(
                        timeout=self._config.timeout_seconds,
                        headers={"Content-Type": "application/json"},
                    )
        return self._client

    def call(
        self,
        method: str,
        params: List[Any],
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Make JSON-RPC call

        Args:
            method: RPC method name
            params: RPC parameters
            timeout: Optional timeout override

        Returns:
            RPC result

        Raises:
            RpcError: On transport failure or RPC error object
        """
        client = self._get_client()
        body = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": method,
            "params": params,
        }
        timeout_val = timeout or self._config.timeout_seconds

        try:
            response = client.post(self._endpoint, json=body, timeout=timeout_val)

            if response.status_code == 429:
                raise RpcError.rate_limited(self._endpoint)

            response.raise_for_status()
            result = response.json()

        except httpx.TimeoutException as e:
            logger.warning(f"RPC timeout calling {method}: {self._endpoint}")
            raise RpcError.timeout(self._endpoint, timeout_val) from e

        except httpx.HTTPStatusError as e:
            logger.warning(f"RPC HTTP error calling {method}: {e}")
            raise RpcError(
                f"HTTP error {e.response.status_code}",
                endpoint=self._endpoint,
                original_error=e,
            ) from e

        except httpx.RequestError as e:
            logger.warning(f"RPC connection error calling {method}: {e}")
            raise RpcError.connection_failed(self._endpoint, e) from e

        except ValueError as e:
            raise RpcError(
                f"Invalid JSON from RPC: {e}",
                ErrorCode.RPC_INVALID_RESPONSE,
                endpoint=self._endpoint,
                original_error=e,
            ) from e

        if "error" in result:
            error = result["error"]
            error_msg = error.get("message", str(error))
            rpc_error = RpcError(
                f"RPC error: {error_msg}",
                ErrorCode.RPC_INVALID_RESPONSE,
                endpoint=self._endpoint,
            )
            rpc_error.details["rpc_error_code"] = error.get("code")
            rpc_error.details["rpc_error_data"] = error.get("data")
            raise rpc_error

        return result.get("result")

    def get_account_info(
        self,
        address: str,
        encoding: str = "base64",
        commitment: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Get account information

        Args:
            address: Account address (base58)
            encoding: Data encoding ("base64", "jsonParsed", etc.)
            commitment: Commitment level

        Returns:
            Account info or None if not found
        """
        params = [
            address,
            {
                "encoding": encoding,
                "commitment": commitment or self.commitment,
            },
        ]
        result = self.call("getAccountInfo", params)
        return result.get("value") if result else None

    def get_parsed_account_info(
        self,
        address: str,
        commitment: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Get account information with jsonParsed encoding

        Accounts the node cannot parse come back with ``data`` as
        ``[<base64>, "base64"]`` instead of a dict.
        """
        return self.get_account_info(address, encoding="jsonParsed", commitment=commitment)

    def get_token_accounts_by_owner(
        self,
        owner: str,
        mint: Optional[str] = None,
        program_id: Optional[str] = None,
        encoding: str = "jsonParsed",
        commitment: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Get token accounts owned by address

        Args:
            owner: Owner address
            mint: Optional mint filter
            program_id: Optional program filter (used when mint is not given)
            encoding: Data encoding

        Returns:
            List of {"pubkey", "account"} entries
        """
        from ..types.solana_tokens import TOKEN_PROGRAM_ID

        filter_param = {}
        if mint:
            filter_param["mint"] = mint
        else:
            filter_param["programId"] = program_id or TOKEN_PROGRAM_ID

        params = [
            owner,
            filter_param,
            {
                "encoding": encoding,
                "commitment": commitment or self.commitment,
            },
        ]
        result = self.call("getTokenAccountsByOwner", params)
        return result.get("value", []) if result else []

    def get_signature_statuses(
        self,
        signatures: List[str],
        search_transaction_history: bool = False,
    ) -> List[Optional[Dict[str, Any]]]:
        """
        Get statuses for a list of signatures

        Returns:
            One entry per signature; None for unknown signatures
        """
        params: List[Any] = [signatures]
        if search_transaction_history:
            params.append({"searchTransactionHistory": True})
        result = self.call("getSignatureStatuses", params)
        return result.get("value", []) if result else []

    def get_signature_status(
        self,
        signature: str,
        search_transaction_history: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """
        Get status of a single signature

        Returns:
            Dict with slot, confirmations, err, confirmationStatus, or None
        """
        statuses = self.get_signature_statuses([signature], search_transaction_history)
        return statuses[0] if statuses else None

    def send_transaction(
        self,
        transaction: bytes,
        skip_preflight: bool = False,
        preflight_commitment: Optional[str] = None,
    ) -> str:
        """
        Send signed transaction

        Args:
            transaction: Signed transaction bytes
            skip_preflight: Skip preflight simulation
            preflight_commitment: Preflight commitment level

        Returns:
            Transaction signature (base58)
        """
        tx_data = base64.b64encode(transaction).decode("ascii")

        params = [
            tx_data,
            {
                "skipPreflight": skip_preflight,
                "preflightCommitment": preflight_commitment or self.commitment,
                "encoding": "base64",
            },
        ]
        return self.call("sendTransaction", params)

    # =========================================================================
    # Signature listeners
    # =========================================================================

    def _get_subscriptions(self) -> SignatureSubscriptions:
        if self._subscriptions is None:
            self._subscriptions = SignatureSubscriptions(
                self,
                poll_interval=self._config.status_poll_interval,
            )
        return self._subscriptions

    def on_signature(
        self,
        signature: str,
        callback: Callable[[Dict[str, Any]], None],
        commitment: Optional[str] = None,
    ) -> int:
        """
        Register a one-shot listener for a signature

        The callback receives {"err": ..., "slot": ...} once the signature
        reaches the commitment level or fails on-chain.

        Returns:
            Subscription id for remove_signature_listener()
        """
        if self._closed:
            raise RpcError.client_closed(self._endpoint)
        return self._get_subscriptions().subscribe(
            signature,
            callback,
            commitment or self.commitment,
        )

    def remove_signature_listener(self, subscription_id: int) -> None:
        """Stop and forget a signature listener"""
        if self._subscriptions is not None:
            self._subscriptions.remove(subscription_id)

    def wait_for_signature(self, subscription_id: int, timeout: float) -> bool:
        """Block until the listener fired; False on timeout or unknown id"""
        if self._subscriptions is None:
            return False
        return self._subscriptions.wait(subscription_id, timeout)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self):
        """Stop listeners and close HTTP client; the client cannot be reopened"""
        with self._client_lock:
            self._closed = True
        if self._subscriptions is not None:
            self._subscriptions.close()
            self._subscriptions = None
        with self._client_lock:
            client, self._client = self._client, None
        if client is not None:
            client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
