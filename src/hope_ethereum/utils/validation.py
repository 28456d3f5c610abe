"""
Validation utilities for hope-ethereum.

Provides input validation for:
- Ethereum addresses
- Transaction hashes
- Token and ether amounts

The ``is_*`` predicates never raise; the ``validate_*`` functions raise
ValidationError (or a subclass) on failure.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Any, Union

from hope_ethereum.constants import ADDRESS_LENGTH, HEX_PREFIX, TX_HASH_LENGTH
from hope_ethereum.errors import InvalidAddressError, InvalidTransactionHashError, ValidationError

MAX_UINT256 = 2**256 - 1

_HEX_BODY = re.compile(r"^[0-9a-fA-F]*$")


def _is_prefixed_hex(value: Any, length: int) -> bool:
    return (
        isinstance(value, str)
        and len(value) == length
        and value.startswith(HEX_PREFIX)
        and bool(_HEX_BODY.match(value[len(HEX_PREFIX):]))
    )


def is_valid_address(address: Any) -> bool:
    """
    Check if a value is a 0x-prefixed, 40 hex digit Ethereum address.

    Checksum casing is not enforced.
    """
    return _is_prefixed_hex(address, ADDRESS_LENGTH)


def is_valid_transaction_hash(tx_hash: Any) -> bool:
    """Check if a value is a 0x-prefixed, 64 hex digit transaction hash."""
    return _is_prefixed_hex(tx_hash, TX_HASH_LENGTH)


def validate_address(address: Any, field_name: str = "address") -> str:
    """
    Validate Ethereum address format.

    Args:
        address: Address to validate
        field_name: Field name for error messages

    Returns:
        The address unchanged

    Raises:
        InvalidAddressError: If address is invalid
    """
    if not is_valid_address(address):
        raise InvalidAddressError(str(address), field=field_name)
    return address


def validate_tx_hash(tx_hash: Any) -> str:
    """
    Validate transaction hash format.

    Raises:
        InvalidTransactionHashError: If the hash is malformed
    """
    if not is_valid_transaction_hash(tx_hash):
        raise InvalidTransactionHashError(tx_hash)
    return tx_hash


def validate_amount(
    amount: Union[int, Decimal],
    field_name: str = "amount",
    max_value: int = MAX_UINT256,
) -> Union[int, Decimal]:
    """
    Validate that an amount is non-negative and fits in a uint256.

    Args:
        amount: Amount to validate (integer base units or Decimal)
        field_name: Field name for error messages
        max_value: Upper bound (inclusive)

    Raises:
        ValidationError: If amount is negative, not a number or too large
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, Decimal)):
        raise ValidationError(f"{field_name} must be an integer or Decimal")
    if amount < 0:
        raise ValidationError(f"{field_name} must be non-negative")
    if amount > max_value:
        raise ValidationError(f"{field_name} exceeds maximum uint256 value")
    return amount
