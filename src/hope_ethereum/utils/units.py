"""Conversions between human-readable amounts and on-chain integers."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext
from functools import lru_cache
from typing import Union

from web3 import Web3

from hope_ethereum.errors import ValidationError

Number = Union[int, float, str, Decimal]


@lru_cache(maxsize=None)
def _scale(decimals: int) -> int:
    if decimals < 0:
        raise ValidationError("decimals must be non-negative")
    return 10**decimals


def convert_to_uint(amount: Number, decimals: int) -> int:
    """
    Convert a readable amount to its integer base-unit representation.

    Fractions below the smallest unit are truncated. Amounts that are not
    finite numbers raise ValidationError.

    Example:
        >>> convert_to_uint("1.5", 18)
        1500000000000000000
    """
    try:
        parsed = Decimal(str(amount))
    except InvalidOperation:
        raise ValidationError(f"amount is not a number: {amount!r}") from None
    if not parsed.is_finite():
        raise ValidationError(f"amount must be finite: {amount!r}")
    with localcontext() as ctx:
        ctx.prec = 80
        value = parsed * _scale(decimals)
    if value < 0:
        raise ValidationError("amount must be non-negative")
    return int(value)


def convert_from_uint(value: int, decimals: int) -> Decimal:
    """
    Convert an integer base-unit value to a readable Decimal.

    Example:
        >>> convert_from_uint(1500000000000000000, 18)
        Decimal('1.5')
    """
    with localcontext() as ctx:
        ctx.prec = 80
        return Decimal(value) / _scale(decimals)


def readable_gas_price(gas_price_wei: int) -> Decimal:
    """Gas price in gwei from its wei form."""
    return Decimal(Web3.from_wei(gas_price_wei, "gwei"))


def functional_gas_price(gas_price_gwei: Number) -> int:
    """Gas price in wei, the form used in transaction input."""
    return Web3.to_wei(Decimal(str(gas_price_gwei)), "gwei")


def calculate_maximum_gas_cost(gas_price_wei: int, gas_limit: int) -> Decimal:
    """Maximum fee of a transaction in ether."""
    return Decimal(Web3.from_wei(gas_price_wei * gas_limit, "ether"))
