"""
Signature listeners

One-shot listeners that report when a transaction signature reaches a
commitment level. Each listener polls getSignatureStatuses on its own
daemon thread until it fires or is removed.
"""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Any, Callable, Dict, Optional, TYPE_CHECKING

from ..errors import RpcError

if TYPE_CHECKING:
    from .rpc import RpcClient

logger = logging.getLogger(__name__)

COMMITMENT_RANK = {
    "processed": 0,
    "confirmed": 1,
    "finalized": 2,
}


def reached_commitment(status: Dict[str, Any], commitment: str) -> bool:
    """Check whether a signature status is at or past the commitment level"""
    current = status.get("confirmationStatus")
    if current is None:
        return False
    return COMMITMENT_RANK.get(current, -1) >= COMMITMENT_RANK.get(commitment, 2)


class _SignatureListener(threading.Thread):

    def __init__(
        self,
        rpc: "RpcClient",
        signature: str,
        callback: Callable[[Dict[str, Any]], None],
        commitment: str,
        poll_interval: float,
    ):
        super().__init__(name=f"signature-listener-{signature[:8]}", daemon=True)
        self.signature = signature
        self._rpc = rpc
        self._callback = callback
        self._commitment = commitment
        self._poll_interval = poll_interval
        self._stop_event = threading.Event()
        self.fired = threading.Event()

    def stop(self):
        self._stop_event.set()

    def run(self):
        while not self._stop_event.is_set():
            try:
                status = self._rpc.get_signature_status(self.signature)
            except RpcError as e:
                logger.debug(f"Error checking signature {self.signature}: {e}")
                status = None

            if self._stop_event.is_set():
                return

            if status and (status.get("err") is not None or reached_commitment(status, self._commitment)):
                self._notify(status)
                return

            self._stop_event.wait(self._poll_interval)

    def _notify(self, status: Dict[str, Any]):
        try:
            self._callback({"err": status.get("err"), "slot": status.get("slot")})
        except Exception:
            logger.exception(f"Signature listener callback failed for {self.signature}")
        finally:
            self.fired.set()


class SignatureSubscriptions:
    """
    Registry of active signature listeners

    Usage:
        subs = SignatureSubscriptions(rpc, poll_interval=1.0)
        sub_id = subs.subscribe(sig, on_result, "finalized")
        try:
            subs.wait(sub_id, timeout=30)
        finally:
            subs.remove(sub_id)
    """

    def __init__(
        self,
        rpc: "RpcClient",
        poll_interval: float = 1.0,
        join_timeout: float = 5.0,
    ):
        self._rpc = rpc
        self._poll_interval = poll_interval
        # Upper bound on waiting for an in-flight status poll when removing
        self._join_timeout = join_timeout
        self._listeners: Dict[int, _SignatureListener] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(
        self,
        signature: str,
        callback: Callable[[Dict[str, Any]], None],
        commitment: str = "finalized",
    ) -> int:
        listener = _SignatureListener(
            self._rpc,
            signature,
            callback,
            commitment,
            self._poll_interval,
        )
        with self._lock:
            subscription_id = next(self._ids)
            self._listeners[subscription_id] = listener
        listener.start()
        logger.debug(f"Signature listener {subscription_id} registered for {signature}")
        return subscription_id

    def remove(self, subscription_id: int) -> None:
        with self._lock:
            listener = self._listeners.pop(subscription_id, None)
        if listener is not None:
            listener.stop()
            # A callback may remove its own listener
            if listener is not threading.current_thread():
                listener.join(self._join_timeout)
                if listener.is_alive():
                    logger.warning(
                        f"Signature listener {subscription_id} still running after {self._join_timeout}s"
                    )
            logger.debug(f"Signature listener {subscription_id} removed")

    def wait(self, subscription_id: int, timeout: float) -> bool:
        listener: Optional[_SignatureListener] = self._listeners.get(subscription_id)
        if listener is None:
            return False
        return listener.fired.wait(timeout)

    def close(self) -> None:
        with self._lock:
            ids = list(self._listeners)
        for subscription_id in ids:
            self.remove(subscription_id)
