from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Optional

__all__ = [
    "ResultState",
    "PollState",
    "ReceiptStatus",
    "Receipt",
    "ConfirmationOutcome",
    "GasPriceTarget",
    "GasEstimate",
]


class ResultState(Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class PollState(Enum):
    NOT_STARTED = "not_started"
    POLLING = "polling"
    RESOLVED = "resolved"


class ReceiptStatus(IntEnum):
    FAILED = 0
    SUCCESS = 1


class GasPriceTarget(Enum):
    """The gas price to aim for relative to the network's current price."""

    SLOW = "slow"
    STANDARD = "standard"
    FAST = "fast"


@dataclass
class Receipt:
    """Execution record of a mined transaction.

    Attributes:
        tx_hash: Hash of the transaction (0x-prefixed)
        status: 1 on success, 0 on revert
        block_number: Block the transaction was mined in
        gas_used: Gas consumed by execution
        error: Revert reason or other error detail, if any
        raw: Receipt as returned by the node
    """
    tx_hash: str
    status: ReceiptStatus
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    error: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def succeeded(self) -> bool:
        return self.status == ReceiptStatus.SUCCESS and not self.error


@dataclass(frozen=True)
class ConfirmationOutcome:
    tx_hash: Optional[str]
    succeeded: bool
    message: str
    receipt: Optional[Receipt] = None


@dataclass(frozen=True)
class GasEstimate:
    """Gas price and limit for one transaction.

    Attributes:
        price: Functional gas price in wei, always > 0
        limit: Gas limit, padded for contract calls
        target: Price target the price was derived with
    """
    price: int
    limit: int
    target: GasPriceTarget = GasPriceTarget.STANDARD

    @property
    def max_cost_wei(self) -> int:
        return self.price * self.limit
