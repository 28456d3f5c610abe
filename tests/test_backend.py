"""
Tests for Web3Backend and revert reason decoding.

AsyncWeb3 is replaced by mocks; no node is contacted.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_abi import encode
from eth_utils import to_checksum_address
from web3.exceptions import TransactionNotFound

from conftest import RECIPIENT, TX_HASH
from hope_ethereum import (
    Network,
    ReceiptStatus,
    RetryConfig,
    RpcBackend,
    TransportError,
    Web3Backend,
    get_network_config,
)
from hope_ethereum.backend import decode_revert_reason

NO_DELAY = RetryConfig(max_attempts=3, base_delay_ms=0, jitter=False, retryable_errors=(ConnectionError,))


def revert_payload(reason: str) -> str:
    return "0x08c379a0" + encode(["string"], [reason]).hex()


def make_backend() -> Web3Backend:
    w3 = MagicMock()
    return Web3Backend(w3, retry=NO_DELAY)


class TestDecodeRevertReason:
    """Tests for decode_revert_reason."""

    def test_decodes_error_string(self) -> None:
        assert decode_revert_reason(revert_payload("insufficient balance")) == "insufficient balance"

    def test_accepts_bytes(self) -> None:
        payload = bytes.fromhex(revert_payload("nope")[2:])

        assert decode_revert_reason(payload) == "nope"

    @pytest.mark.parametrize("raw", [None, "", "0x", "0xdeadbeef", "0x08c379a0", 42])
    def test_returns_none_for_other_data(self, raw: object) -> None:
        assert decode_revert_reason(raw) is None


class TestWeb3Backend:
    """Tests for Web3Backend over a mocked AsyncWeb3."""

    def test_satisfies_protocol(self) -> None:
        assert isinstance(make_backend(), RpcBackend)

    def test_from_config(self) -> None:
        backend = Web3Backend.from_config(get_network_config(Network.SEPOLIA))

        assert backend.w3 is not None

    @pytest.mark.asyncio
    async def test_call(self) -> None:
        backend = make_backend()
        backend.w3.eth.call = AsyncMock(return_value=b"\x01")

        result = await backend.call(b"\xaa\xbb", RECIPIENT)

        assert result == b"\x01"
        tx = backend.w3.eth.call.call_args.args[0]
        assert tx == {"to": to_checksum_address(RECIPIENT), "data": "0xaabb"}

    @pytest.mark.asyncio
    async def test_retries_transient_errors(self) -> None:
        backend = make_backend()
        backend.w3.eth.get_balance = AsyncMock(side_effect=[ConnectionError("reset"), 10**18])

        assert await backend.get_balance(RECIPIENT) == 10**18
        assert backend.w3.eth.get_balance.await_count == 2

    @pytest.mark.asyncio
    async def test_exhausted_retries_become_transport_error(self) -> None:
        backend = make_backend()
        backend.w3.eth.get_transaction_count = AsyncMock(side_effect=ConnectionError("refused"))

        with pytest.raises(TransportError, match="refused") as exc_info:
            await backend.get_transaction_count(RECIPIENT)
        assert exc_info.value.details == {"operation": "eth_getTransactionCount"}
        assert backend.w3.eth.get_transaction_count.await_count == 3

    @pytest.mark.asyncio
    async def test_node_error_message(self) -> None:
        backend = make_backend()
        error = ValueError({"code": -32000, "message": "execution reverted", "data": revert_payload("paused")})
        backend.w3.eth.estimate_gas = AsyncMock(side_effect=error)

        with pytest.raises(TransportError, match="paused"):
            await backend.estimate_gas({"to": RECIPIENT})

    @pytest.mark.asyncio
    async def test_broadcast_is_not_retried(self) -> None:
        backend = make_backend()
        backend.w3.eth.send_raw_transaction = AsyncMock(side_effect=ConnectionError("reset"))

        with pytest.raises(TransportError):
            await backend.send_raw_transaction(b"\x01")
        assert backend.w3.eth.send_raw_transaction.await_count == 1

    @pytest.mark.asyncio
    async def test_broadcast_returns_hex_hash(self) -> None:
        backend = make_backend()
        backend.w3.eth.send_raw_transaction = AsyncMock(return_value=bytes.fromhex(TX_HASH[2:]))

        assert await backend.send_raw_transaction(b"\x01") == TX_HASH


class TestReceipts:
    """Tests for receipt mapping."""

    @pytest.mark.asyncio
    async def test_unmined(self) -> None:
        backend = make_backend()
        backend.w3.eth.get_transaction_receipt = AsyncMock(side_effect=TransactionNotFound("not found"))

        assert await backend.get_transaction_receipt(TX_HASH) is None

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        backend = make_backend()
        backend.w3.eth.get_transaction_receipt = AsyncMock(
            return_value={"status": 1, "blockNumber": 12, "gasUsed": 21000}
        )

        receipt = await backend.get_transaction_receipt(TX_HASH)

        assert receipt.status == ReceiptStatus.SUCCESS
        assert receipt.succeeded is True
        assert receipt.block_number == 12
        assert receipt.gas_used == 21000
        assert receipt.error is None

    @pytest.mark.asyncio
    async def test_failed_without_replayable_reason(self) -> None:
        backend = make_backend()
        backend.w3.eth.get_transaction_receipt = AsyncMock(
            return_value={"status": 0, "blockNumber": 12, "gasUsed": 50000}
        )
        backend.w3.eth.get_transaction = AsyncMock(
            return_value={"from": RECIPIENT, "to": RECIPIENT, "input": "0x", "value": 0, "gas": 60000}
        )
        backend.w3.eth.call = AsyncMock(return_value=b"")

        receipt = await backend.get_transaction_receipt(TX_HASH)

        assert receipt.succeeded is False
        assert receipt.error == "transaction reverted"
        assert backend.w3.eth.call.call_args.kwargs == {"block_identifier": 12}
