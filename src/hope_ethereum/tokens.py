"""Token contract helpers.

ERC20 and ERC721 wrappers over EthereumClient. Reads return a
QueryOperation; writes are coroutines returning a TransactionTracker that is
already failed when anything goes wrong before the broadcast.

Example:
    >>> dai = ERC20(client, "0x6B175474E89094C44Da98b954EedeAC495271d0F")
    >>> await dai.load_details().wait()
    >>> balance = await dai.query_balance_of("0x...").wait()
    >>> tracker = await dai.transfer("0x<key>", "0x<recipient>", Decimal("12.5"))
"""
from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Any, Optional

from .abi import FunctionMessage
from .client import EthereumClient
from .config import Network, NetworkConfig
from .errors import EthereumError, ValidationError
from .models import GasPriceTarget
from .query import QueryOperation
from .tracker import TransactionTracker
from .utils.units import Number, convert_from_uint, convert_to_uint
from .utils.validation import validate_address

__all__ = ["EthereumContract", "Token", "ERC20", "ERC721"]

_NAME = FunctionMessage("name", output_types=("string",))
_SYMBOL = FunctionMessage("symbol", output_types=("string",))
_DECIMALS = FunctionMessage("decimals", output_types=("uint8",), default_is_valid=True)
_TOTAL_SUPPLY = FunctionMessage("totalSupply", output_types=("uint256",), default_is_valid=True)


class EthereumContract:
    """A contract deployed at known addresses on mainnet and, optionally, Sepolia."""

    def __init__(self, mainnet_address: Optional[str], sepolia_address: Optional[str] = None):
        if mainnet_address:
            validate_address(mainnet_address, "mainnet_address")
        if sepolia_address:
            validate_address(sepolia_address, "sepolia_address")
        self.mainnet_address = mainnet_address
        self.sepolia_address = sepolia_address

    def contract_address(self, network_config: NetworkConfig) -> str:
        """Address of the contract on ``network_config``'s network.

        Raises:
            ValidationError: If the contract has no address on that network
        """
        if network_config.name == Network.MAINNET:
            address = self.mainnet_address
        else:
            address = self.sepolia_address
        if not address:
            raise ValidationError(
                f"No {network_config.name.value} address to use.",
                details={"network": network_config.name.value},
            )
        return address


class Token(EthereumContract):
    """Base class for token contracts bound to a client.

    ``name``, ``symbol`` and ``decimals`` may be given up front or filled
    in from the chain with ``load_details()``.
    """

    def __init__(
        self,
        client: EthereumClient,
        mainnet_address: Optional[str],
        sepolia_address: Optional[str] = None,
        *,
        name: Optional[str] = None,
        symbol: Optional[str] = None,
        decimals: Optional[int] = None,
    ):
        super().__init__(mainnet_address, sepolia_address)
        self.client = client
        self.name = name
        self.symbol = symbol
        self.decimals = decimals

    @property
    def address(self) -> str:
        return self.contract_address(self.client.network_config)

    def query_name(self) -> QueryOperation[str]:
        return self._query(_NAME)

    def query_symbol(self) -> QueryOperation[str]:
        return self._query(_SYMBOL)

    def load_details(self) -> QueryOperation["Token"]:
        """Query the token's details and store them on this instance."""

        async def _fetch() -> "Token":
            await self._fetch_details()
            return self

        return QueryOperation.run(_fetch, description=f"{type(self).__name__} details")

    async def _fetch_details(self) -> None:
        self.name, self.symbol = await asyncio.gather(
            self.query_name().wait(),
            self.query_symbol().wait(),
        )

    def _query(self, function: FunctionMessage, sender_address: Optional[str] = None) -> QueryOperation[Any]:
        try:
            address = self.address
        except EthereumError as e:
            return QueryOperation.failed(e, description=function.signature)
        return self.client.query(function, address, sender_address)

    async def _send(
        self,
        function: FunctionMessage,
        private_key: str,
        gas_price: Optional[int],
        gas_limit: Optional[int],
        target: GasPriceTarget,
    ) -> TransactionTracker:
        try:
            address = self.address
        except EthereumError as e:
            return TransactionTracker.failed(self.client.backend, e)
        return await self.client.send_contract_message(
            function,
            private_key,
            address,
            gas_price=gas_price,
            gas_limit=gas_limit,
            target=target,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(symbol={self.symbol!r}, mainnet={self.mainnet_address!r}, sepolia={self.sepolia_address!r})"


class ERC20(Token):
    """Fungible token. Amounts are exchanged in token units as Decimal."""

    def query_decimals(self) -> QueryOperation[int]:
        return self._query(_DECIMALS)

    def query_total_supply(self) -> QueryOperation[int]:
        """Total supply in base units."""
        return self._query(_TOTAL_SUPPLY)

    def query_balance_of(self, owner: str) -> QueryOperation[Decimal]:
        """Token balance of ``owner`` in token units."""
        try:
            validate_address(owner, "owner")
        except EthereumError as e:
            return QueryOperation.failed(e, description="balanceOf(address)")

        balance_of = FunctionMessage(
            "balanceOf", ("address",), (owner,), ("uint256",), default_is_valid=True
        )

        async def _fetch() -> Decimal:
            decimals = await self._require_decimals()
            raw = await self._query(balance_of, owner).wait()
            return convert_from_uint(raw, decimals)

        return QueryOperation.run(_fetch, description=balance_of.signature)

    def query_allowance(self, owner: str, spender: str) -> QueryOperation[int]:
        """Base units ``spender`` may still transfer on behalf of ``owner``."""
        try:
            validate_address(owner, "owner")
            validate_address(spender, "spender")
        except EthereumError as e:
            return QueryOperation.failed(e, description="allowance(address,address)")
        return self._query(
            FunctionMessage(
                "allowance",
                ("address", "address"),
                (owner, spender),
                ("uint256",),
                default_is_valid=True,
            )
        )

    async def transfer(
        self,
        private_key: str,
        to: str,
        amount: Number,
        gas_price: Optional[int] = None,
        gas_limit: Optional[int] = None,
        target: GasPriceTarget = GasPriceTarget.STANDARD,
    ) -> TransactionTracker:
        """Transfer ``amount`` tokens to ``to``."""
        try:
            validate_address(to, "to")
            value = convert_to_uint(amount, await self._require_decimals())
            function = FunctionMessage("transfer", ("address", "uint256"), (to, value), ("bool",))
        except EthereumError as e:
            return TransactionTracker.failed(self.client.backend, e)
        return await self._send(function, private_key, gas_price, gas_limit, target)

    async def transfer_from(
        self,
        private_key: str,
        from_address: str,
        to: str,
        amount: Number,
        gas_price: Optional[int] = None,
        gas_limit: Optional[int] = None,
        target: GasPriceTarget = GasPriceTarget.STANDARD,
    ) -> TransactionTracker:
        """Transfer ``amount`` tokens from ``from_address`` using an allowance."""
        try:
            validate_address(from_address, "from_address")
            validate_address(to, "to")
            value = convert_to_uint(amount, await self._require_decimals())
            function = FunctionMessage(
                "transferFrom",
                ("address", "address", "uint256"),
                (from_address, to, value),
                ("bool",),
            )
        except EthereumError as e:
            return TransactionTracker.failed(self.client.backend, e)
        return await self._send(function, private_key, gas_price, gas_limit, target)

    async def approve(
        self,
        private_key: str,
        spender: str,
        amount: Number,
        gas_price: Optional[int] = None,
        gas_limit: Optional[int] = None,
        target: GasPriceTarget = GasPriceTarget.STANDARD,
    ) -> TransactionTracker:
        """Allow ``spender`` to transfer up to ``amount`` tokens."""
        try:
            validate_address(spender, "spender")
            value = convert_to_uint(amount, await self._require_decimals())
            function = FunctionMessage("approve", ("address", "uint256"), (spender, value), ("bool",))
        except EthereumError as e:
            return TransactionTracker.failed(self.client.backend, e)
        return await self._send(function, private_key, gas_price, gas_limit, target)

    async def _fetch_details(self) -> None:
        await super()._fetch_details()
        self.decimals = await self.query_decimals().wait()

    async def _require_decimals(self) -> int:
        if self.decimals is None:
            self.decimals = await self.query_decimals().wait()
        return self.decimals


class ERC721(Token):
    """Non-fungible token. Token IDs are plain integers."""

    def __init__(
        self,
        client: EthereumClient,
        mainnet_address: Optional[str],
        sepolia_address: Optional[str] = None,
        *,
        name: Optional[str] = None,
        symbol: Optional[str] = None,
    ):
        super().__init__(client, mainnet_address, sepolia_address, name=name, symbol=symbol, decimals=0)

    def query_balance_of(self, owner: str) -> QueryOperation[int]:
        """Number of tokens held by ``owner``."""
        return self._query_checked(
            FunctionMessage("balanceOf", ("address",), (owner,), ("uint256",), default_is_valid=True),
            owner=owner,
        )

    def query_owner_of(self, token_id: int) -> QueryOperation[str]:
        return self._query_checked(FunctionMessage("ownerOf", ("uint256",), (token_id,), ("address",)))

    def query_token_uri(self, token_id: int) -> QueryOperation[str]:
        return self._query_checked(FunctionMessage("tokenURI", ("uint256",), (token_id,), ("string",)))

    def query_total_supply(self) -> QueryOperation[int]:
        """Number of tokens tracked by the contract (ERC721 enumerable extension)."""
        return self._query(_TOTAL_SUPPLY)

    def query_token_by_index(self, index: int) -> QueryOperation[int]:
        return self._query_checked(
            FunctionMessage("tokenByIndex", ("uint256",), (index,), ("uint256",), default_is_valid=True)
        )

    def query_token_of_owner_by_index(self, owner: str, index: int) -> QueryOperation[int]:
        """Token ID at position ``index`` of ``owner``'s tokens."""
        return self._query_checked(
            FunctionMessage(
                "tokenOfOwnerByIndex",
                ("address", "uint256"),
                (owner, index),
                ("uint256",),
                default_is_valid=True,
            ),
            owner=owner,
        )

    def query_get_approved(self, token_id: int) -> QueryOperation[str]:
        """Approved address of ``token_id``; the zero address when there is none."""
        return self._query_checked(
            FunctionMessage("getApproved", ("uint256",), (token_id,), ("address",), default_is_valid=True)
        )

    def query_is_approved_for_all(self, owner: str, operator: str) -> QueryOperation[bool]:
        return self._query_checked(
            FunctionMessage(
                "isApprovedForAll",
                ("address", "address"),
                (owner, operator),
                ("bool",),
                default_is_valid=True,
            ),
            owner=owner,
            operator=operator,
        )

    async def approve(
        self,
        private_key: str,
        to: str,
        token_id: int,
        gas_price: Optional[int] = None,
        gas_limit: Optional[int] = None,
        target: GasPriceTarget = GasPriceTarget.STANDARD,
    ) -> TransactionTracker:
        """Approve ``to`` to transfer ``token_id``."""
        return await self._send_checked(
            FunctionMessage("approve", ("address", "uint256"), (to, token_id)),
            private_key,
            gas_price,
            gas_limit,
            target,
            to=to,
        )

    async def set_approval_for_all(
        self,
        private_key: str,
        operator: str,
        approved: bool,
        gas_price: Optional[int] = None,
        gas_limit: Optional[int] = None,
        target: GasPriceTarget = GasPriceTarget.STANDARD,
    ) -> TransactionTracker:
        """Grant or revoke ``operator``'s control over all of the sender's tokens."""
        return await self._send_checked(
            FunctionMessage("setApprovalForAll", ("address", "bool"), (operator, approved)),
            private_key,
            gas_price,
            gas_limit,
            target,
            operator=operator,
        )

    async def safe_transfer_from(
        self,
        private_key: str,
        from_address: str,
        to: str,
        token_id: int,
        gas_price: Optional[int] = None,
        gas_limit: Optional[int] = None,
        target: GasPriceTarget = GasPriceTarget.STANDARD,
        data: Optional[bytes] = None,
    ) -> TransactionTracker:
        """Transfer ``token_id``; ``data`` is passed on to a receiving contract."""
        if data is None:
            function = FunctionMessage(
                "safeTransferFrom",
                ("address", "address", "uint256"),
                (from_address, to, token_id),
            )
        else:
            function = FunctionMessage(
                "safeTransferFrom",
                ("address", "address", "uint256", "bytes"),
                (from_address, to, token_id, data),
            )
        return await self._send_checked(
            function,
            private_key,
            gas_price,
            gas_limit,
            target,
            from_address=from_address,
            to=to,
        )

    def _query_checked(self, function: FunctionMessage, **addresses: str) -> QueryOperation[Any]:
        try:
            for field_name, address in addresses.items():
                validate_address(address, field_name)
        except EthereumError as e:
            return QueryOperation.failed(e, description=function.signature)
        return self._query(function)

    async def _send_checked(
        self,
        function: FunctionMessage,
        private_key: str,
        gas_price: Optional[int],
        gas_limit: Optional[int],
        target: GasPriceTarget,
        **addresses: str,
    ) -> TransactionTracker:
        try:
            for field_name, address in addresses.items():
                validate_address(address, field_name)
        except EthereumError as e:
            return TransactionTracker.failed(self.client.backend, e)
        return await self._send(function, private_key, gas_price, gas_limit, target)
