"""Constants for hope-ethereum.

This module defines the constant values used across the package,
including hash and address formats, gas parameters and polling defaults.
"""

# Ethereum Constants
HEX_PREFIX = "0x"
ADDRESS_LENGTH = 42
TX_HASH_LENGTH = 66
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
ETHER_DECIMALS = 18

# Gas Constants
# Contract call estimates are padded to raw * 100 / 90 (~11% headroom)
GAS_LIMIT_PADDING_NUMERATOR = 100
GAS_LIMIT_PADDING_DENOMINATOR = 90
SLOW_PRICE_NUMERATOR = 2
SLOW_PRICE_DENOMINATOR = 3
FAST_PRICE_MULTIPLIER = 2
MIN_GAS_PRICE = 1

# Polling Constants
DEFAULT_POLL_INTERVAL_SECONDS = 5.0

# Network Constants
PROVIDER_TIMEOUT_SECONDS = 30

__all__ = [
    "HEX_PREFIX",
    "ADDRESS_LENGTH",
    "TX_HASH_LENGTH",
    "ZERO_ADDRESS",
    "ETHER_DECIMALS",
    "GAS_LIMIT_PADDING_NUMERATOR",
    "GAS_LIMIT_PADDING_DENOMINATOR",
    "SLOW_PRICE_NUMERATOR",
    "SLOW_PRICE_DENOMINATOR",
    "FAST_PRICE_MULTIPLIER",
    "MIN_GAS_PRICE",
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "PROVIDER_TIMEOUT_SECONDS",
]
