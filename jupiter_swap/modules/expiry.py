"""
Expired-transaction recovery

A confirmation wait that runs out raises an error starting with
``TransactionExpiredTimeoutError`` and naming the signature it gave up on.
The transaction may still have landed, so before reporting it as expired the
signature status is checked once more.

The policy is a plain callable so SwapModule can swap or disable it.
"""

import logging
import re
from typing import Callable, Optional, TYPE_CHECKING

from ..errors import SwapAdapterError, TransactionError

if TYPE_CHECKING:
    from ..infra import RpcClient

logger = logging.getLogger(__name__)

TIMEOUT_MARKER = "TransactionExpiredTimeoutError"
SIGNATURE_PATTERN = re.compile(r"Check signature (\w+) using")

# (error, rpc) -> recovered signature; raises when not recoverable
RecoveryPolicy = Callable[[Exception, "RpcClient"], str]


def error_message(error: Exception) -> str:
    """Bare error message, without the [code] prefix of library errors"""
    if isinstance(error, SwapAdapterError):
        return error.message
    return str(error)


def is_expired_timeout(error: Exception) -> bool:
    return error_message(error).startswith(TIMEOUT_MARKER)


def extract_signature(message: str) -> Optional[str]:
    match = SIGNATURE_PATTERN.search(message)
    return match.group(1) if match else None


def recover_expired_transaction(error: Exception, rpc: "RpcClient") -> str:
    """
    Treat a timed-out transaction as landed if it is finalized without error

    Args:
        error: Error carrying the timeout marker
        rpc: RPC client used for the status lookup

    Returns:
        The signature named in the error message

    Raises:
        TransactionError: "Transaction expired" when the signature is missing,
            unknown, not finalized, or failed on-chain
    """
    signature = extract_signature(error_message(error))
    if signature:
        status = rpc.get_signature_status(signature)
        if (
            status
            and status.get("confirmationStatus") == "finalized"
            and status.get("err") is None
        ):
            logger.info(f"Transaction {signature} finalized after confirmation timeout")
            return signature
        logger.warning(f"Transaction {signature} not finalized: {status}")

    raise TransactionError.expired(signature)
