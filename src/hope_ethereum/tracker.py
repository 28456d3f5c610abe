"""
Transaction confirmation tracking.

A TransactionTracker is a DeferredResult that resolves once a broadcast
transaction is mined. It polls for the receipt on a fixed interval inside
its own asyncio task:

    NOT_STARTED -> POLLING -> RESOLVED

- A malformed hash resolves the tracker at once, without any request.
- Missing receipts and transport errors are retried on the next tick. Any
  other error from the backend resolves the tracker with that error.
- A receipt with a success status resolves with a ConfirmationOutcome; a
  failing status resolves with TransactionFailedError.
- ``cancel()``, a set cancel token or the configured timeout resolve with
  TrackerCancelledError / TrackerTimeoutError. After natural resolution
  they do nothing.

Example:
    >>> tracker = TransactionTracker.start(backend, tx_hash, TrackerConfig(timeout=600))
    >>> tracker.on_success(lambda o: print("mined", o.tx_hash))
    >>> tracker.on_error(lambda e: print("failed:", e.code, e))
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional, Union

from hope_ethereum.backend import RpcBackend
from hope_ethereum.config import TrackerConfig
from hope_ethereum.deferred import DeferredResult, Err, spawn
from hope_ethereum.errors import (
    EthereumError,
    InvalidTransactionHashError,
    TrackerCancelledError,
    TrackerTimeoutError,
    TransactionFailedError,
    TransportError,
)
from hope_ethereum.models import ConfirmationOutcome, PollState, Receipt
from hope_ethereum.utils.logging import get_logger
from hope_ethereum.utils.validation import is_valid_transaction_hash

_logger = get_logger(__name__)

SUCCESS_MESSAGE = "Transaction successful!"
REVERTED_MESSAGE = "transaction reverted"


class TransactionTracker(DeferredResult[ConfirmationOutcome]):
    """
    Eventual confirmation of a broadcast transaction.

    Use ``TransactionTracker.start`` rather than the constructor. All methods
    must be called from the thread running the tracker's event loop.

    Attributes:
        backend: RPC backend used for receipt requests
        tx_hash: Hash of the tracked transaction
        config: Poll interval and optional timeout
        receipt_requests: Number of receipt requests issued so far
    """

    def __init__(
        self,
        backend: RpcBackend,
        tx_hash: Optional[str],
        config: Optional[TrackerConfig] = None,
        cancel_token: Optional[asyncio.Event] = None,
    ) -> None:
        super().__init__()
        self.backend = backend
        self.tx_hash = tx_hash
        self.config = config or TrackerConfig()
        self.receipt_requests = 0
        self._cancel_token = cancel_token
        self._stop_event = asyncio.Event()
        self._poll_state = PollState.NOT_STARTED
        self._task: Optional[asyncio.Task[Any]] = None
        # Registered first so the state is RESOLVED before user observers run
        self.on_completion(self._mark_resolved)

    @classmethod
    def start(
        cls,
        backend: RpcBackend,
        tx_hash: str,
        config: Optional[TrackerConfig] = None,
        cancel_token: Optional[asyncio.Event] = None,
    ) -> "TransactionTracker":
        """
        Begin tracking a transaction and return immediately.

        Args:
            backend: RPC backend to request receipts from
            tx_hash: 0x-prefixed transaction hash
            config: Poll interval and optional timeout
            cancel_token: Event that cancels tracking when set

        Returns:
            The tracker. It is already failed if ``tx_hash`` is malformed;
            otherwise polling runs as a task on the running event loop.
        """
        tracker = cls(backend, tx_hash, config, cancel_token)
        tracker._begin()
        return tracker

    @classmethod
    def failed(
        cls,
        backend: RpcBackend,
        error: Union[str, BaseException],
        tx_hash: Optional[str] = None,
    ) -> "TransactionTracker":
        """Tracker for a transaction that never reached the network."""
        tracker = cls(backend, tx_hash)
        tracker.resolve_error(error)
        return tracker

    @property
    def poll_state(self) -> PollState:
        return self._poll_state

    @property
    def task(self) -> Optional[asyncio.Task[Any]]:
        return self._task

    def cancel(self) -> bool:
        """
        Stop polling and fail with TrackerCancelledError.

        Returns:
            True if this call resolved the tracker, False if it had already
            resolved.
        """
        if self.done:
            return False
        self._stop_event.set()
        resolved = self._abort(TrackerCancelledError(self.tx_hash))
        if self._task is not None and not self._task.done():
            self._task.cancel()
        return resolved

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------
    def _begin(self) -> None:
        if not is_valid_transaction_hash(self.tx_hash):
            _logger.warning("Refusing to track malformed transaction hash", extra={"tx_hash": self.tx_hash})
            self.resolve_error(InvalidTransactionHashError(self.tx_hash))
            return
        self._poll_state = PollState.POLLING
        self._task = spawn(self._poll_loop())

    async def _poll_loop(self) -> None:
        loop = asyncio.get_running_loop()
        timeout = self.config.timeout
        deadline = loop.time() + timeout if timeout is not None else None
        _logger.info(
            "Tracking transaction",
            extra={"tx_hash": self.tx_hash, "poll_interval": self.config.poll_interval, "timeout": timeout},
        )

        try:
            while not self.done:
                interval = self.config.poll_interval
                if deadline is not None:
                    interval = min(interval, max(deadline - loop.time(), 0))

                if await self._wait_for_stop(interval):
                    self._abort(TrackerCancelledError(self.tx_hash))
                    return
                if deadline is not None and loop.time() >= deadline:
                    self._abort(TrackerTimeoutError(self.tx_hash, timeout))
                    return

                try:
                    receipt = await self._fetch_receipt()
                except Exception as e:
                    _logger.exception(
                        "Receipt request raised a non-transport error",
                        extra={"tx_hash": self.tx_hash, "attempt": self.receipt_requests},
                    )
                    self.resolve_error(e)
                    return
                if self._stopped():
                    self._abort(TrackerCancelledError(self.tx_hash))
                    return
                if receipt is not None:
                    self._settle(receipt)
                    return
        except asyncio.CancelledError:
            self._abort(TrackerCancelledError(self.tx_hash))
            raise

    def _stopped(self) -> bool:
        if self._stop_event.is_set():
            return True
        return self._cancel_token is not None and self._cancel_token.is_set()

    async def _wait_for_stop(self, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds; True if cancel() ran or the cancel token was set."""
        waiters = [asyncio.ensure_future(self._stop_event.wait())]
        if self._cancel_token is not None:
            waiters.append(asyncio.ensure_future(self._cancel_token.wait()))
        try:
            await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                waiter.cancel()
        return self._stopped()

    async def _fetch_receipt(self) -> Optional[Receipt]:
        self.receipt_requests += 1
        try:
            return await self.backend.get_transaction_receipt(self.tx_hash)
        except TransportError as e:
            # Only transport failures are retried
            _logger.warning(
                "Receipt request failed; retrying on next tick",
                extra={"tx_hash": self.tx_hash, "attempt": self.receipt_requests, "error": str(e)},
            )
            return None

    def _settle(self, receipt: Receipt) -> None:
        if receipt.succeeded:
            _logger.info(
                "Transaction confirmed",
                extra={"tx_hash": self.tx_hash, "block_number": receipt.block_number},
            )
            self.resolve_success(
                ConfirmationOutcome(
                    tx_hash=self.tx_hash,
                    succeeded=True,
                    message=SUCCESS_MESSAGE,
                    receipt=receipt,
                )
            )
            return

        message = receipt.error or REVERTED_MESSAGE
        _logger.info(
            "Transaction failed on chain",
            extra={"tx_hash": self.tx_hash, "block_number": receipt.block_number, "error": message},
        )
        self.resolve_error(TransactionFailedError(message, tx_hash=self.tx_hash, receipt=receipt))

    def _abort(self, error: EthereumError) -> bool:
        resolved = self._resolve(Err(error), quiet=True)
        if resolved:
            _logger.info("Stopped tracking transaction", extra={"tx_hash": self.tx_hash, "reason": error.code})
        return resolved

    def _mark_resolved(self) -> None:
        self._poll_state = PollState.RESOLVED

    def __repr__(self) -> str:
        return f"TransactionTracker(tx_hash={self.tx_hash!r}, state={self.state.value}, poll_state={self._poll_state.value})"
