"""RPC transport for hope-ethereum.

The rest of the package talks to the chain only through the RpcBackend
protocol. Web3Backend implements it over web3.py's AsyncWeb3; tests
substitute an in-memory backend.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, Protocol, TypeVar, runtime_checkable

import aiohttp
from eth_utils import to_checksum_address
from web3 import AsyncWeb3, Web3
from web3.exceptions import ContractLogicError, TimeExhausted, TransactionNotFound, Web3Exception

from .config import NetworkConfig
from .constants import (
    PROVIDER_TIMEOUT_SECONDS,
    ZERO_ADDRESS,
)
from .errors import EthereumError, TransportError
from .models import Receipt, ReceiptStatus
from .utils.logging import get_logger
from .utils.retry import RetryConfig, retry_async

__all__ = ["RpcBackend", "Web3Backend", "decode_revert_reason"]

T = TypeVar("T")

_logger = get_logger(__name__)

# Error(string) selector
REVERT_SELECTOR = "0x08c379a0"
ABI_SELECTOR_LENGTH = 4
ABI_WORD_LENGTH = 32

TRANSIENT_ERRORS = (ConnectionError, asyncio.TimeoutError, aiohttp.ClientError, TimeExhausted)


@runtime_checkable
class RpcBackend(Protocol):
    """Chain operations the package depends on."""

    async def call(self, data: bytes, to: str, sender: Optional[str] = None) -> bytes:
        """eth_call: return raw return data of a read-only call."""

    async def send_raw_transaction(self, raw_transaction: bytes) -> str:
        """Broadcast a signed transaction and return its 0x-prefixed hash."""

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[Receipt]:
        """Return the receipt, or None while the transaction is unmined."""

    async def gas_price(self) -> int:
        """Current network gas price in wei."""

    async def estimate_gas(self, transaction: dict) -> int:
        """Raw gas estimate of a call or transfer."""

    async def get_balance(self, address: str) -> int:
        """Ether balance in wei at the latest block."""

    async def get_transaction_count(self, address: str) -> int:
        """Next nonce of an address, counting pending transactions."""


def decode_revert_reason(raw: Any) -> Optional[str]:
    """Decode a Solidity ``Error(string)`` revert payload.

    Args:
        raw: Hex-encoded error data string (or bytes)

    Returns:
        Decoded revert reason string, or None if decoding fails
    """
    if isinstance(raw, (bytes, bytearray)):
        raw = Web3.to_hex(raw)
    if not isinstance(raw, str) or not raw.startswith(REVERT_SELECTOR):
        return None
    try:
        data = bytes.fromhex(raw[2:])
    except ValueError:
        return None
    # 4 bytes selector + 32 bytes offset + 32 bytes length
    offset = ABI_SELECTOR_LENGTH + ABI_WORD_LENGTH
    if len(data) < offset + ABI_WORD_LENGTH:
        return None
    strlen = int.from_bytes(data[offset : offset + ABI_WORD_LENGTH], "big")
    reason_start = offset + ABI_WORD_LENGTH
    return data[reason_start : reason_start + strlen].decode(errors="ignore")


def _rpc_error_message(e: Exception) -> str:
    """Best human-readable message of a web3 / node error."""
    if isinstance(e, ContractLogicError):
        decoded = decode_revert_reason(getattr(e, "data", None))
        return decoded or e.message or str(e)
    if isinstance(e, ValueError) and e.args and isinstance(e.args[0], dict):
        payload = e.args[0]
        reason = payload.get("message") or payload.get("reason")
        data = payload.get("data")
        decoded = decode_revert_reason(data) if isinstance(data, str) else None
        return decoded or reason or str(e)
    return str(e) or type(e).__name__


class Web3Backend:
    """RpcBackend over an AsyncWeb3 instance.

    Idempotent reads are retried on transient transport errors according to
    ``retry``; broadcasts are sent exactly once. Every web3 failure surfaces
    as TransportError.

    Example:
        >>> backend = Web3Backend.from_config(get_network_config(Network.SEPOLIA))
        >>> price = await backend.gas_price()
    """

    def __init__(self, w3: AsyncWeb3, retry: Optional[RetryConfig] = None):
        self.w3 = w3
        self.retry = retry or RetryConfig(retryable_errors=TRANSIENT_ERRORS)

    @classmethod
    def from_config(
        cls,
        config: NetworkConfig,
        timeout: int = PROVIDER_TIMEOUT_SECONDS,
        retry: Optional[RetryConfig] = None,
    ) -> "Web3Backend":
        # Timeout bounds every request so a stalled node cannot hang a poll tick
        w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(config.rpc_url, request_kwargs={"timeout": timeout}))
        return cls(w3, retry=retry)

    async def _read(self, operation: str, fn: Callable[[], Awaitable[T]]) -> T:
        try:
            return await retry_async(fn, self.retry, operation=operation)
        except EthereumError:
            raise
        except (Web3Exception, ValueError, *TRANSIENT_ERRORS) as e:
            raise TransportError(_rpc_error_message(e), details={"operation": operation}) from e

    async def call(self, data: bytes, to: str, sender: Optional[str] = None) -> bytes:
        tx: dict = {"to": to_checksum_address(to), "data": Web3.to_hex(data)}
        if sender and sender != ZERO_ADDRESS:
            tx["from"] = to_checksum_address(sender)
        result = await self._read("eth_call", lambda: self.w3.eth.call(tx))
        return bytes(result)

    async def send_raw_transaction(self, raw_transaction: bytes) -> str:
        try:
            tx_hash = await self.w3.eth.send_raw_transaction(raw_transaction)
        except (Web3Exception, ValueError, *TRANSIENT_ERRORS) as e:
            raise TransportError(_rpc_error_message(e), details={"operation": "eth_sendRawTransaction"}) from e
        tx_hash_hex = Web3.to_hex(tx_hash)
        _logger.info("Transaction broadcast", extra={"tx_hash": tx_hash_hex})
        return tx_hash_hex

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[Receipt]:
        async def _fetch() -> Any:
            try:
                return await self.w3.eth.get_transaction_receipt(tx_hash)
            except TransactionNotFound:
                return None

        raw = await self._read("eth_getTransactionReceipt", _fetch)
        if raw is None:
            return None

        status = ReceiptStatus(raw.get("status", 0))
        receipt = Receipt(
            tx_hash=tx_hash,
            status=status,
            block_number=raw.get("blockNumber"),
            gas_used=raw.get("gasUsed"),
            raw=dict(raw),
        )
        if status == ReceiptStatus.FAILED:
            receipt.error = await self._revert_reason(tx_hash, receipt.block_number)
        return receipt

    async def _revert_reason(self, tx_hash: str, block_number: Optional[int]) -> str:
        """Replay a failed transaction with eth_call to recover its revert reason."""
        fallback = "transaction reverted"
        try:
            tx = await self.w3.eth.get_transaction(tx_hash)
            replay = {
                "from": tx["from"],
                "to": tx["to"],
                "data": tx.get("input", "0x"),
                "value": tx.get("value", 0),
                "gas": tx.get("gas"),
            }
            await self.w3.eth.call(replay, block_identifier=block_number)
        except ContractLogicError as e:
            return _rpc_error_message(e) or fallback
        except (Web3Exception, ValueError, *TRANSIENT_ERRORS) as e:
            _logger.debug("Could not replay failed transaction", extra={"tx_hash": tx_hash, "error": str(e)})
        return fallback

    async def gas_price(self) -> int:
        async def _fetch() -> int:
            return await self.w3.eth.gas_price

        return int(await self._read("eth_gasPrice", _fetch))

    async def estimate_gas(self, transaction: dict) -> int:
        return int(await self._read("eth_estimateGas", lambda: self.w3.eth.estimate_gas(transaction)))

    async def get_balance(self, address: str) -> int:
        checksummed = to_checksum_address(address)
        return int(await self._read("eth_getBalance", lambda: self.w3.eth.get_balance(checksummed)))

    async def get_transaction_count(self, address: str) -> int:
        checksummed = to_checksum_address(address)
        return int(
            await self._read(
                "eth_getTransactionCount",
                lambda: self.w3.eth.get_transaction_count(checksummed, "pending"),
            )
        )
