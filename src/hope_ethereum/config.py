from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .constants import DEFAULT_POLL_INTERVAL_SECONDS

__all__ = ["Network", "NetworkConfig", "NETWORKS", "get_network_config", "TrackerConfig"]


class Network(str, Enum):
    MAINNET = "mainnet"
    SEPOLIA = "sepolia"


@dataclass(frozen=True)
class NetworkConfig:
    name: Network
    chain_id: int
    rpc_url: str


NETWORKS: dict[Network, NetworkConfig] = {
    Network.MAINNET: NetworkConfig(
        name=Network.MAINNET,
        chain_id=1,
        rpc_url="https://ethereum-rpc.publicnode.com",
    ),
    Network.SEPOLIA: NetworkConfig(
        name=Network.SEPOLIA,
        chain_id=11155111,
        rpc_url="https://ethereum-sepolia-rpc.publicnode.com",
    ),
}


def get_network_config(network: Network, rpc_url: Optional[str] = None) -> NetworkConfig:
    cfg = NETWORKS[network]
    if rpc_url:
        return replace(cfg, rpc_url=rpc_url)
    return cfg


class TrackerConfig(BaseModel):
    """
    Configuration for transaction receipt polling.

    Example:
        ```python
        config = TrackerConfig(poll_interval=3.0, timeout=600.0)
        ```
    """

    model_config = ConfigDict(frozen=True)

    poll_interval: float = Field(
        default=DEFAULT_POLL_INTERVAL_SECONDS,
        gt=0,
        description="Seconds to wait between receipt requests",
    )
    timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Seconds after which polling gives up; None polls until cancelled",
    )
