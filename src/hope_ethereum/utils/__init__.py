"""
Utility modules for hope-ethereum.

Provides:
- logging: Package logger namespace and opt-in handler setup
- retry: Exponential backoff for idempotent RPC reads
- units: Conversions between readable amounts and base units
- validation: Address, transaction hash and amount validation
"""

from hope_ethereum.utils.logging import (
    configure_logging,
    disable_logging,
    enable_debug,
    get_logger,
    set_level,
)
from hope_ethereum.utils.retry import NO_RETRY, RetryConfig, calculate_delay, retry_async
from hope_ethereum.utils.units import (
    calculate_maximum_gas_cost,
    convert_from_uint,
    convert_to_uint,
    functional_gas_price,
    readable_gas_price,
)
from hope_ethereum.utils.validation import (
    MAX_UINT256,
    is_valid_address,
    is_valid_transaction_hash,
    validate_address,
    validate_amount,
    validate_tx_hash,
)

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_level",
    "disable_logging",
    "enable_debug",
    # Retry
    "RetryConfig",
    "NO_RETRY",
    "calculate_delay",
    "retry_async",
    # Units
    "convert_to_uint",
    "convert_from_uint",
    "readable_gas_price",
    "functional_gas_price",
    "calculate_maximum_gas_cost",
    # Validation
    "MAX_UINT256",
    "is_valid_address",
    "is_valid_transaction_hash",
    "validate_address",
    "validate_amount",
    "validate_tx_hash",
]
