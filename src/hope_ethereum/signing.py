"""Transaction signing over eth-account."""

from __future__ import annotations

from typing import Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address

from .errors import ValidationError
from .utils.validation import validate_address, validate_amount

__all__ = ["load_account", "sign_transaction"]


def load_account(private_key: str) -> LocalAccount:
    """Load a signing account from a hex private key.

    Raises:
        ValidationError: If the key is malformed. The key itself is never
            included in the error.
    """
    try:
        return Account.from_key(private_key)
    except Exception:
        raise ValidationError("Invalid private key format (key not shown for security)") from None


def sign_transaction(
    private_key: str,
    chain_id: int,
    to: str,
    value: int,
    nonce: int,
    gas_price: int,
    gas_limit: int,
    data: Optional[bytes] = None,
) -> bytes:
    """Sign a legacy (gasPrice) transaction.

    Args:
        private_key: Sender's private key (0x-prefixed hex)
        chain_id: Chain ID for replay protection
        to: Recipient or contract address
        value: Ether to send, in wei
        nonce: Sender's transaction count
        gas_price: Gas price in wei
        gas_limit: Gas limit
        data: ABI encoded call data; empty for plain transfers

    Returns:
        Raw signed transaction bytes, ready for eth_sendRawTransaction
    """
    validate_address(to, "to")
    validate_amount(value, "value")
    if gas_price <= 0:
        raise ValidationError("gas_price must be positive")
    if gas_limit <= 0:
        raise ValidationError("gas_limit must be positive")

    account = load_account(private_key)
    tx = {
        "chainId": chain_id,
        "to": to_checksum_address(to),
        "value": value,
        "nonce": nonce,
        "gasPrice": gas_price,
        "gas": gas_limit,
        "data": data or b"",
    }
    signed = account.sign_transaction(tx)
    return bytes(signed.raw_transaction)
