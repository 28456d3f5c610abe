"""hope-ethereum: deferred results, transaction tracking and gas estimation over Ethereum JSON-RPC."""

from .abi import FunctionMessage
from .backend import RpcBackend, Web3Backend
from .client import EthereumClient
from .config import NETWORKS, Network, NetworkConfig, TrackerConfig, get_network_config
from .constants import (
    ADDRESS_LENGTH,
    DEFAULT_POLL_INTERVAL_SECONDS,
    ETHER_DECIMALS,
    PROVIDER_TIMEOUT_SECONDS,
    TX_HASH_LENGTH,
    ZERO_ADDRESS,
)
from .deferred import DeferredResult, Err, Ok, Outcome
from .errors import (
    EthereumError,
    InconclusiveResultError,
    InvalidAddressError,
    InvalidTransactionHashError,
    TrackerCancelledError,
    TrackerTimeoutError,
    TrackingAbortedError,
    TransactionFailedError,
    TransportError,
    ValidationError,
)
from .gas import GasEstimator
from .models import (
    ConfirmationOutcome,
    GasEstimate,
    GasPriceTarget,
    PollState,
    Receipt,
    ReceiptStatus,
    ResultState,
)
from .query import QueryOperation
from .tokens import ERC20, ERC721, EthereumContract, Token
from .tracker import TransactionTracker
from .utils import (
    RetryConfig,
    calculate_maximum_gas_cost,
    configure_logging,
    convert_from_uint,
    convert_to_uint,
    disable_logging,
    functional_gas_price,
    get_logger,
    is_valid_address,
    is_valid_transaction_hash,
    readable_gas_price,
    set_level,
    validate_address,
    validate_amount,
    validate_tx_hash,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "EthereumClient",
    # Deferred results
    "DeferredResult",
    "Ok",
    "Err",
    "Outcome",
    "QueryOperation",
    "TransactionTracker",
    # Gas
    "GasEstimator",
    "GasEstimate",
    "GasPriceTarget",
    # Contracts
    "FunctionMessage",
    "EthereumContract",
    "Token",
    "ERC20",
    "ERC721",
    # Transport
    "RpcBackend",
    "Web3Backend",
    # Config
    "Network",
    "NetworkConfig",
    "NETWORKS",
    "get_network_config",
    "TrackerConfig",
    "RetryConfig",
    # Models
    "ConfirmationOutcome",
    "PollState",
    "Receipt",
    "ReceiptStatus",
    "ResultState",
    # Errors
    "EthereumError",
    "TransportError",
    "InconclusiveResultError",
    "TransactionFailedError",
    "ValidationError",
    "InvalidAddressError",
    "InvalidTransactionHashError",
    "TrackingAbortedError",
    "TrackerCancelledError",
    "TrackerTimeoutError",
    # Constants
    "ADDRESS_LENGTH",
    "TX_HASH_LENGTH",
    "ZERO_ADDRESS",
    "ETHER_DECIMALS",
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "PROVIDER_TIMEOUT_SECONDS",
    # Utilities
    "convert_to_uint",
    "convert_from_uint",
    "readable_gas_price",
    "functional_gas_price",
    "calculate_maximum_gas_cost",
    "is_valid_address",
    "is_valid_transaction_hash",
    "validate_address",
    "validate_tx_hash",
    "validate_amount",
    "get_logger",
    "configure_logging",
    "set_level",
    "disable_logging",
    # Version
    "__version__",
]
