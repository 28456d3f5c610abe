"""Ethereum client for hope-ethereum.

This module provides the EthereumClient class, the entry point for
reading chain state and sending transactions on one network.

The client supports:
- Contract reads, resolved through QueryOperation
- Ether balance reads
- Ether transfers and contract calls, tracked by TransactionTracker
- Gas price and gas limit estimation

Every client carries its own NetworkConfig, so clients for different
networks can be used side by side.

Example:
    >>> from hope_ethereum import EthereumClient, Network
    >>> client = EthereumClient(Network.SEPOLIA)
    >>> tracker = await client.send_ether("0x<key>", "0x<recipient>", "0.01")
    >>> tracker.on_success(lambda o: print(o.message))
    >>> outcome = await tracker.wait()
"""
from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Awaitable, Callable, Optional, Union

from .abi import FunctionMessage
from .backend import RpcBackend, Web3Backend
from .config import Network, NetworkConfig, TrackerConfig, get_network_config
from .constants import ETHER_DECIMALS
from .errors import EthereumError, InconclusiveResultError
from .gas import GasEstimator
from .models import GasPriceTarget
from .query import QueryOperation
from .signing import load_account, sign_transaction
from .tracker import TransactionTracker
from .utils.logging import get_logger
from .utils.units import Number, convert_from_uint, convert_to_uint
from .utils.validation import validate_address, validate_amount

_logger = get_logger(__name__)


class EthereumClient:
    """Client for one Ethereum network.

    Args:
        network: Network to use, or a ready NetworkConfig
        backend: RPC backend; defaults to a Web3Backend over the network's RPC URL
        tracker_config: Polling configuration of every tracker this client starts
        rpc_url: Overrides the network's default RPC URL
    """

    def __init__(
        self,
        network: Union[Network, NetworkConfig] = Network.SEPOLIA,
        backend: Optional[RpcBackend] = None,
        tracker_config: Optional[TrackerConfig] = None,
        rpc_url: Optional[str] = None,
    ):
        if isinstance(network, NetworkConfig):
            self.network_config = network
        else:
            self.network_config = get_network_config(network, rpc_url)
        self.backend = backend or Web3Backend.from_config(self.network_config)
        self.tracker_config = tracker_config or TrackerConfig()
        self._gas = GasEstimator(self.backend)

    @property
    def gas(self) -> GasEstimator:
        return self._gas

    @property
    def chain_id(self) -> int:
        return self.network_config.chain_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def query(
        self,
        function: FunctionMessage,
        contract_address: str,
        sender_address: Optional[str] = None,
    ) -> QueryOperation:
        """Read a contract function. Must be called inside a running event loop."""
        return QueryOperation.issue(self.backend, function, contract_address, sender_address)

    def get_ether_balance(self, address: str) -> QueryOperation[Decimal]:
        """Ether balance of ``address`` in ether units.

        A zero balance is a valid answer here: eth_getBalance reports the
        balance directly instead of decoding ABI return data.
        """
        try:
            validate_address(address)
        except EthereumError as e:
            return QueryOperation.failed(e, description="eth_getBalance")

        async def _fetch() -> Optional[Decimal]:
            wei = await self.backend.get_balance(address)
            if wei is None:
                return None
            return convert_from_uint(wei, ETHER_DECIMALS)

        return QueryOperation.run(_fetch, description="eth_getBalance")

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def track(self, tx_hash: str, cancel_token: Optional[asyncio.Event] = None) -> TransactionTracker:
        """Track an already broadcast transaction."""
        return TransactionTracker.start(self.backend, tx_hash, self.tracker_config, cancel_token)

    async def send_ether(
        self,
        private_key: str,
        to: str,
        amount: Number,
        gas_price: Optional[int] = None,
        gas_limit: Optional[int] = None,
        target: GasPriceTarget = GasPriceTarget.STANDARD,
    ) -> TransactionTracker:
        """Send ether and track the transaction.

        Args:
            private_key: Sender's private key
            to: Recipient address
            amount: Ether to send, in ether units (e.g. "0.01")
            gas_price: Gas price in wei; estimated from ``target`` if omitted
            gas_limit: Gas limit; estimated if omitted
            target: Price target used when estimating the gas price

        Returns:
            Tracker of the transaction. Failures before the broadcast
            (invalid input, estimation or transport errors) resolve the
            tracker with that error instead of raising.
        """
        try:
            validate_address(to, "to")
            value = convert_to_uint(amount, ETHER_DECIMALS)
        except EthereumError as e:
            return TransactionTracker.failed(self.backend, e)

        return await self._send(
            private_key,
            to,
            value=value,
            data=None,
            gas_price=gas_price,
            gas_limit=gas_limit,
            target=target,
            estimate_limit=lambda: self._gas.estimate_transfer_limit(to, value),
        )

    async def send_contract_message(
        self,
        function: FunctionMessage,
        private_key: str,
        contract_address: str,
        gas_price: Optional[int] = None,
        gas_limit: Optional[int] = None,
        value: int = 0,
        target: GasPriceTarget = GasPriceTarget.STANDARD,
    ) -> TransactionTracker:
        """Send a contract function call and track the transaction.

        Args:
            function: Function message to send
            private_key: Sender's private key
            contract_address: Contract to call
            gas_price: Gas price in wei; estimated from ``target`` if omitted
            gas_limit: Gas limit; estimated with headroom if omitted
            value: Ether to attach, in wei
            target: Price target used when estimating the gas price

        Returns:
            Tracker of the transaction, already failed if anything before
            the broadcast went wrong.
        """
        try:
            validate_address(contract_address, "contract_address")
            validate_amount(value, "value")
            data = function.encode()
            sender = load_account(private_key).address
        except EthereumError as e:
            return TransactionTracker.failed(self.backend, e)

        return await self._send(
            private_key,
            contract_address,
            value=value,
            data=data,
            gas_price=gas_price,
            gas_limit=gas_limit,
            target=target,
            estimate_limit=lambda: self._gas.estimate_call_limit(function, contract_address, sender, value),
        )

    async def _send(
        self,
        private_key: str,
        to: str,
        *,
        value: int,
        data: Optional[bytes],
        gas_price: Optional[int],
        gas_limit: Optional[int],
        target: GasPriceTarget,
        estimate_limit: Callable[[], Awaitable[int]],
    ) -> TransactionTracker:
        try:
            account = load_account(private_key)
            if gas_limit is None:
                gas_limit = await estimate_limit()
            if gas_price is None:
                gas_price = await self._gas.estimate_price(target)
            nonce = await self.backend.get_transaction_count(account.address)
            if nonce is None:
                raise InconclusiveResultError("node returned no transaction count")
            raw_transaction = sign_transaction(
                private_key,
                self.chain_id,
                to,
                value,
                nonce,
                gas_price,
                gas_limit,
                data,
            )
            tx_hash = await self.backend.send_raw_transaction(raw_transaction)
        except EthereumError as e:
            _logger.warning(
                "Transaction not sent",
                extra={"to": to, "code": e.code, "error": e.message},
            )
            return TransactionTracker.failed(self.backend, e)

        _logger.info(
            "Transaction sent",
            extra={
                "tx_hash": tx_hash,
                "to": to,
                "value": value,
                "gas_price": gas_price,
                "gas_limit": gas_limit,
                "network": self.network_config.name.value,
            },
        )
        return self.track(tx_hash)

    def __repr__(self) -> str:
        return f"EthereumClient(network={self.network_config.name.value!r}, chain_id={self.chain_id})"
