"""
Shared fixtures for hope-ethereum tests.

FakeBackend is a scripted, in-memory RpcBackend: contract call results are
keyed by function signature, receipts are served from a queue, and every
request is recorded for assertions.
"""

import asyncio
from typing import Any, Dict, List, Optional, Sequence, Union

import pytest
from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector

from hope_ethereum import EthereumClient, Network, TrackerConfig
from hope_ethereum.models import Receipt, ReceiptStatus


# =============================================================================
# Test Constants
# =============================================================================

# Well-known throwaway key; never holds funds
PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
SENDER = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"

RECIPIENT = "0x1234567890123456789012345678901234567890"
SPENDER = "0xabcdefABCDEFabcdefABCDEFabcdefABCDEFabcd"
TOKEN_MAINNET = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
TOKEN_SEPOLIA = "0x9876543210987654321098765432109876543210"

TX_HASH = "0x" + "ab" * 32
GWEI = 10**9
FAST_POLL = TrackerConfig(poll_interval=0.01)

ScriptedReceipt = Union[Receipt, None, BaseException]


def abi_output(types: Sequence[str], values: Sequence[Any]) -> bytes:
    """ABI-encode return data the way a contract would."""
    return encode(list(types), list(values))


def make_receipt(
    status: ReceiptStatus = ReceiptStatus.SUCCESS,
    error: Optional[str] = None,
    tx_hash: str = TX_HASH,
) -> Receipt:
    return Receipt(tx_hash=tx_hash, status=status, block_number=100, gas_used=21000, error=error)


# =============================================================================
# Fake backend
# =============================================================================


class FakeBackend:
    """Scripted RpcBackend."""

    def __init__(self) -> None:
        self.call_responses: Dict[bytes, Union[bytes, BaseException]] = {}
        self.receipts: List[ScriptedReceipt] = []
        self.receipt_delay = 0.0
        self.gas_price_value: Union[int, BaseException] = 30 * GWEI
        self.gas_estimate: Union[int, BaseException] = 21000
        self.balance: Union[int, None, BaseException] = 0
        self.nonce = 7
        self.broadcast_error: Optional[BaseException] = None
        self.tx_hash = TX_HASH

        self.calls: List[Dict[str, Any]] = []
        self.estimates: List[Dict[str, Any]] = []
        self.sent: List[bytes] = []
        self.receipt_requests = 0
        self.gas_price_requests = 0
        self.in_flight = 0
        self.max_in_flight = 0

    def respond(self, signature: str, result: Union[bytes, BaseException]) -> None:
        """Script the return data of a contract function, e.g. ``respond("symbol()", ...)``."""
        self.call_responses[function_signature_to_4byte_selector(signature)] = result

    async def call(self, data: bytes, to: str, sender: Optional[str] = None) -> bytes:
        self.calls.append({"data": data, "to": to, "sender": sender})
        result = self.call_responses.get(data[:4], b"")
        if isinstance(result, BaseException):
            raise result
        return result

    async def send_raw_transaction(self, raw_transaction: bytes) -> str:
        if self.broadcast_error is not None:
            raise self.broadcast_error
        self.sent.append(raw_transaction)
        return self.tx_hash

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[Receipt]:
        self.receipt_requests += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.receipt_delay:
                await asyncio.sleep(self.receipt_delay)
            item = self.receipts.pop(0) if self.receipts else None
        finally:
            self.in_flight -= 1
        if isinstance(item, BaseException):
            raise item
        return item

    async def gas_price(self) -> int:
        self.gas_price_requests += 1
        if isinstance(self.gas_price_value, BaseException):
            raise self.gas_price_value
        return self.gas_price_value

    async def estimate_gas(self, transaction: dict) -> int:
        self.estimates.append(transaction)
        if isinstance(self.gas_estimate, BaseException):
            raise self.gas_estimate
        return self.gas_estimate

    async def get_balance(self, address: str) -> int:
        if isinstance(self.balance, BaseException):
            raise self.balance
        return self.balance

    async def get_transaction_count(self, address: str) -> int:
        return self.nonce


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def client(backend: FakeBackend) -> EthereumClient:
    return EthereumClient(Network.SEPOLIA, backend=backend, tracker_config=FAST_POLL)
