"""
Exception definitions for jupiter_swap
"""

from enum import Enum
from typing import Optional
from decimal import Decimal


class ErrorCode(Enum):
    """
    Unified error codes for swap operations

    1xxx - RPC errors
    2xxx - Transaction errors
    3xxx - Swap API errors
    4xxx - Token/mint errors
    6xxx - Signer errors
    7xxx - Operation errors
    9xxx - Configuration errors
    """
    # RPC errors (recoverable)
    RPC_CONNECTION_FAILED = "1001"
    RPC_TIMEOUT = "1002"
    RPC_RATE_LIMITED = "1003"
    RPC_INVALID_RESPONSE = "1004"

    # Transaction errors
    TX_SEND_FAILED = "2002"
    TX_CONFIRMATION_FAILED = "2003"
    TX_INSUFFICIENT_FUNDS = "2004"
    TX_EXPIRED = "2006"

    # Swap API errors
    API_HTTP_ERROR = "3101"
    API_INVALID_RESPONSE = "3102"

    # Token/mint errors
    MINT_NOT_FOUND = "4101"

    # Signer errors
    SIGNER_NOT_CONFIGURED = "6001"
    SIGNER_FAILED = "6002"

    # Operation errors
    OPERATION_FAILED = "7002"

    # Configuration errors
    CONFIG_INVALID = "9001"
    CONFIG_MISSING = "9002"


class SwapAdapterError(Exception):
    """
    Base exception for all jupiter_swap errors

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
        recoverable: Whether the error might succeed on retry
        original_error: The underlying exception if any
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.OPERATION_FAILED,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.recoverable = recoverable
        self.original_error = original_error
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"

    @classmethod
    def wrap(cls, error: Exception) -> "SwapAdapterError":
        """Wrap a foreign exception, keeping its original message"""
        return cls(str(error), original_error=error)


class RpcError(SwapAdapterError):
    """
    RPC-related errors - typically recoverable

    Raised when:
    - Connection to RPC endpoint fails
    - Request times out
    - Rate limit is hit
    - RPC returns an error object
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.RPC_CONNECTION_FAILED,
        original_error: Optional[Exception] = None,
        endpoint: Optional[str] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=True,
            original_error=original_error,
            details={"endpoint": endpoint} if endpoint else None,
        )
        self.endpoint = endpoint

    @classmethod
    def connection_failed(cls, endpoint: str, error: Exception = None) -> "RpcError":
        return cls(
            f"Failed to connect to RPC endpoint: {endpoint}",
            ErrorCode.RPC_CONNECTION_FAILED,
            original_error=error,
            endpoint=endpoint,
        )

    @classmethod
    def timeout(cls, endpoint: str, timeout_seconds: float) -> "RpcError":
        return cls(
            f"RPC request timed out after {timeout_seconds}s",
            ErrorCode.RPC_TIMEOUT,
            endpoint=endpoint,
        )

    @classmethod
    def rate_limited(cls, endpoint: str) -> "RpcError":
        return cls(
            "RPC rate limit exceeded",
            ErrorCode.RPC_RATE_LIMITED,
            endpoint=endpoint,
        )

    @classmethod
    def client_closed(cls, endpoint: str) -> "RpcError":
        error = cls(
            f"RPC client for {endpoint} is closed",
            ErrorCode.RPC_CONNECTION_FAILED,
            endpoint=endpoint,
        )
        error.recoverable = False
        return error


class ApiError(SwapAdapterError):
    """
    Swap API (Jupiter) errors

    Raised when:
    - Quote or swap endpoint answers with a non-2xx status
    - Response is missing expected fields
    - Request cannot be sent
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.API_HTTP_ERROR,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=status_code is not None and status_code >= 500,
            original_error=original_error,
            details={"status_code": status_code, "body": body},
        )
        self.status_code = status_code
        self.body = body

    @classmethod
    def http_status(cls, context: str, status_code: int, reason: str, body: str) -> "ApiError":
        return cls(
            f"{context}: {status_code} {reason} {body}",
            status_code=status_code,
            body=body,
        )

    @classmethod
    def invalid_response(cls, context: str, reason: str) -> "ApiError":
        return cls(f"{context}: {reason}", ErrorCode.API_INVALID_RESPONSE)


class MintNotFound(SwapAdapterError):
    """
    Mint account missing or not JSON-parsed - not recoverable
    """

    def __init__(self, message: str = "Could not find mint", mint: Optional[str] = None):
        super().__init__(
            message,
            ErrorCode.MINT_NOT_FOUND,
            recoverable=False,
            details={"mint": mint},
        )
        self.mint = mint


class InsufficientFunds(SwapAdapterError):
    """
    Insufficient balance - not recoverable without deposit

    Raised when:
    - Sell amount resolves to nothing
    """

    def __init__(
        self,
        message: str,
        token: Optional[str] = None,
        available: Optional[Decimal] = None,
    ):
        super().__init__(
            message,
            ErrorCode.TX_INSUFFICIENT_FUNDS,
            recoverable=False,
            details={
                "token": token,
                "available": str(available) if available is not None else None,
            },
        )
        self.token = token
        self.available = available

    @classmethod
    def nothing_to_sell(cls, token: str, available: Optional[Decimal] = None) -> "InsufficientFunds":
        return cls("No tokens to sell", token=token, available=available)


class TransactionError(SwapAdapterError):
    """
    Transaction execution errors

    Raised when:
    - Transaction cannot be signed or sent
    - Confirmation wait times out
    - Transaction expired without landing
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.TX_SEND_FAILED,
        signature: Optional[str] = None,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=recoverable,
            original_error=original_error,
            details={"signature": signature},
        )
        self.signature = signature

    @classmethod
    def finalize_failed(cls, error: Exception) -> "TransactionError":
        message = error.message if isinstance(error, SwapAdapterError) else str(error)
        return cls(
            f"Error finalizing transaction: {message}",
            ErrorCode.TX_SEND_FAILED,
            original_error=error,
        )

    @classmethod
    def expired_timeout(cls, signature: str, timeout_seconds: float) -> "TransactionError":
        return cls(
            f"TransactionExpiredTimeoutError: Transaction was not confirmed in "
            f"{timeout_seconds:.2f} seconds. It is unknown if it succeeded or failed. "
            f"Check signature {signature} using the Solana Explorer or CLI tools.",
            ErrorCode.TX_CONFIRMATION_FAILED,
            signature=signature,
            recoverable=True,
        )

    @classmethod
    def expired(cls, signature: Optional[str] = None) -> "TransactionError":
        return cls("Transaction expired", ErrorCode.TX_EXPIRED, signature=signature)


class SignerError(SwapAdapterError):
    """
    Signing-related errors

    Raised when:
    - No private key configured
    - Private key cannot be decoded
    - Wallet is not a required signer of the transaction
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SIGNER_FAILED,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, code, recoverable=False, original_error=original_error)

    @classmethod
    def not_configured(cls) -> "SignerError":
        return cls(
            "No signer configured. Provide a base58 private key or keypair.",
            ErrorCode.SIGNER_NOT_CONFIGURED,
        )

    @classmethod
    def failed(cls, reason: str) -> "SignerError":
        return cls(f"Signing failed: {reason}", ErrorCode.SIGNER_FAILED)


class ConfigurationError(SwapAdapterError):
    """
    Configuration and argument validation errors

    Raised when:
    - Required configuration is missing
    - Configuration values are invalid
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
    ):
        super().__init__(message, code, recoverable=False)

    @classmethod
    def missing(cls, param: str) -> "ConfigurationError":
        return cls(f"Missing required configuration: {param}", ErrorCode.CONFIG_MISSING)

    @classmethod
    def invalid(cls, param: str, reason: str) -> "ConfigurationError":
        return cls(f"Invalid configuration '{param}': {reason}", ErrorCode.CONFIG_INVALID)
