"""
Exception hierarchy for hope-ethereum.

All errors inherit from EthereumError, which carries a machine-readable
code, an optional transaction hash and a details dictionary. Errors of
asynchronous operations are delivered through the DeferredResult error
channel rather than raised; synchronous helpers raise them directly.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__ = [
    "EthereumError",
    "TransportError",
    "InconclusiveResultError",
    "TransactionFailedError",
    "ValidationError",
    "InvalidAddressError",
    "InvalidTransactionHashError",
    "TrackingAbortedError",
    "TrackerCancelledError",
    "TrackerTimeoutError",
]


class EthereumError(Exception):
    """
    Base exception for all hope-ethereum errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code (e.g., "RPC_ERROR").
        tx_hash: Optional transaction hash related to the error.
        details: Optional dictionary with additional error context.

    Example:
        >>> raise EthereumError(
        ...     "Transaction failed",
        ...     code="TX_FAILED",
        ...     tx_hash="0x123...",
        ...     details={"gas_used": 21000}
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "ETHEREUM_ERROR",
        tx_hash: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.tx_hash = tx_hash
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"tx_hash={self.tx_hash!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to a dictionary for JSON serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "tx_hash": self.tx_hash,
            "details": self.details,
        }


class TransportError(EthereumError):
    """Raised when the RPC endpoint is unreachable or answers with an error."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="RPC_ERROR", details=details)


class InconclusiveResultError(EthereumError):
    """
    Raised when a read returns no data or a default-valued result.

    For ABI encoded return data an all-zero value cannot be told apart from
    a call that returned nothing (wrong address, missing function), so such
    results are reported as errors instead of being handed back as zero.
    """

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="INCONCLUSIVE_RESULT", details=details)


class TransactionFailedError(EthereumError):
    """Raised when a mined transaction's receipt reports a failing status."""

    def __init__(
        self,
        message: str,
        *,
        tx_hash: Optional[str] = None,
        receipt: Any = None,
    ) -> None:
        super().__init__(message, code="TRANSACTION_FAILED", tx_hash=tx_hash)
        self.receipt = receipt


class ValidationError(EthereumError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "VALIDATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class InvalidAddressError(ValidationError):
    """Raised when an Ethereum address is malformed."""

    def __init__(self, address: str, *, field: str = "address") -> None:
        super().__init__(
            f"{field} must be 0x followed by 40 hex characters",
            code="INVALID_ADDRESS",
            details={"field": field, "value": address},
        )
        self.address = address


class InvalidTransactionHashError(ValidationError):
    """Raised when a transaction hash is malformed."""

    def __init__(self, tx_hash: Any) -> None:
        super().__init__(
            "invalid transaction hash",
            code="INVALID_TX_HASH",
            details={"value": tx_hash},
        )


class TrackingAbortedError(EthereumError):
    """
    Base for trackers that stopped waiting before the chain answered.

    Lets callers tell "gave up waiting" apart from "chain rejected it".
    """


class TrackerCancelledError(TrackingAbortedError):
    """Raised when a transaction tracker is cancelled."""

    def __init__(self, tx_hash: Optional[str] = None) -> None:
        super().__init__("cancelled", code="CANCELLED", tx_hash=tx_hash)


class TrackerTimeoutError(TrackingAbortedError):
    """Raised when a transaction tracker reaches its deadline."""

    def __init__(self, tx_hash: Optional[str] = None, timeout: Optional[float] = None) -> None:
        super().__init__(
            "timed out",
            code="TIMED_OUT",
            tx_hash=tx_hash,
            details={"timeout": timeout} if timeout is not None else None,
        )
