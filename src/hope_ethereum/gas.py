"""
Gas price and gas limit estimation.

Price targets are multipliers of the network gas price P:

    SLOW      P * 2 / 3
    STANDARD  P
    FAST      P * 2

Contract call limits are padded by raw * 100 / 90 for headroom; plain ether
transfers cost a fixed amount and are returned as estimated.
"""

from __future__ import annotations

from typing import Optional

from eth_utils import to_checksum_address

from hope_ethereum.abi import FunctionMessage
from hope_ethereum.backend import RpcBackend
from hope_ethereum.constants import (
    FAST_PRICE_MULTIPLIER,
    GAS_LIMIT_PADDING_DENOMINATOR,
    GAS_LIMIT_PADDING_NUMERATOR,
    MIN_GAS_PRICE,
    SLOW_PRICE_DENOMINATOR,
    SLOW_PRICE_NUMERATOR,
    ZERO_ADDRESS,
)
from hope_ethereum.errors import InconclusiveResultError, ValidationError
from hope_ethereum.models import GasEstimate, GasPriceTarget
from hope_ethereum.utils.logging import get_logger
from hope_ethereum.utils.validation import validate_address, validate_amount

_logger = get_logger(__name__)


def modify_gas_price(target: GasPriceTarget, price: int) -> int:
    """
    Apply a price target to a network gas price.

    Raises:
        ValidationError: If ``price`` is not positive
    """
    if price <= 0:
        raise ValidationError("gas price must be positive", details={"price": price})
    if target == GasPriceTarget.SLOW:
        return max(price * SLOW_PRICE_NUMERATOR // SLOW_PRICE_DENOMINATOR, MIN_GAS_PRICE)
    if target == GasPriceTarget.FAST:
        return price * FAST_PRICE_MULTIPLIER
    return price


def pad_gas_limit(raw_limit: int) -> int:
    """Add roughly 11% headroom to a raw contract call estimate."""
    return raw_limit * GAS_LIMIT_PADDING_NUMERATOR // GAS_LIMIT_PADDING_DENOMINATOR


class GasEstimator:
    """
    Gas estimates for one network.

    Every method is a single request/response over the backend. Transport
    failures propagate as TransportError; a zero answer from the node is
    treated as inconclusive.

    Example:
        >>> estimator = GasEstimator(backend)
        >>> price = await estimator.estimate_price(GasPriceTarget.FAST)
        >>> limit = await estimator.estimate_call_limit(transfer, token, sender)
    """

    def __init__(self, backend: RpcBackend):
        self.backend = backend

    async def estimate_price(self, target: GasPriceTarget = GasPriceTarget.STANDARD) -> int:
        """Network gas price in wei with ``target`` applied."""
        raw_price = await self.backend.gas_price()
        if raw_price <= 0:
            raise InconclusiveResultError("node reported a gas price of zero")
        price = modify_gas_price(target, raw_price)
        _logger.debug(
            "Estimated gas price",
            extra={"target": target.value, "network_price": raw_price, "price": price},
        )
        return price

    async def estimate_transfer_limit(self, to: str, value: int) -> int:
        """Gas limit of a plain ether transfer, unpadded."""
        validate_address(to, "to")
        validate_amount(value, "value")
        raw_limit = await self.backend.estimate_gas({"to": to_checksum_address(to), "value": value})
        return self._require_positive(raw_limit, "transfer")

    async def estimate_call_limit(
        self,
        function: FunctionMessage,
        contract_address: str,
        caller_address: Optional[str] = None,
        value: int = 0,
    ) -> int:
        """Gas limit of a contract call, padded for headroom."""
        validate_address(contract_address, "contract_address")
        transaction = {
            "to": to_checksum_address(contract_address),
            "data": function.encode(),
        }
        if caller_address is not None and caller_address != ZERO_ADDRESS:
            validate_address(caller_address, "caller_address")
            transaction["from"] = to_checksum_address(caller_address)
        if value:
            validate_amount(value, "value")
            transaction["value"] = value

        raw_limit = self._require_positive(await self.backend.estimate_gas(transaction), function.signature)
        limit = pad_gas_limit(raw_limit)
        _logger.debug(
            "Estimated call gas limit",
            extra={"function": function.signature, "raw_limit": raw_limit, "limit": limit},
        )
        return limit

    async def estimate(
        self,
        limit: int,
        target: GasPriceTarget = GasPriceTarget.STANDARD,
    ) -> GasEstimate:
        """Combine an already estimated limit with the current target price."""
        price = await self.estimate_price(target)
        return GasEstimate(price=price, limit=limit, target=target)

    @staticmethod
    def _require_positive(raw_limit: int, what: str) -> int:
        if raw_limit <= 0:
            raise InconclusiveResultError(f"node estimated zero gas for {what}")
        return raw_limit
