#!/usr/bin/env python3
"""
Example: send ether on Sepolia and wait for confirmation

Usage:
    python examples/send_ether.py

Environment Variables:
    SENDER_PRIVATE_KEY: Private key of the funded sender wallet
    RECIPIENT_ADDRESS: Address receiving the ether
    AMOUNT_ETH: Amount to send (default: 0.001)
    RPC_URL: Sepolia RPC URL (default: public node)
"""

import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

from hope_ethereum import (
    EthereumClient,
    EthereumError,
    GasPriceTarget,
    Network,
    TrackerConfig,
    configure_logging,
    readable_gas_price,
)

load_dotenv()

SENDER_PRIVATE_KEY = os.getenv("SENDER_PRIVATE_KEY", "")
RECIPIENT_ADDRESS = os.getenv("RECIPIENT_ADDRESS", "")
AMOUNT_ETH = os.getenv("AMOUNT_ETH", "0.001")
RPC_URL = os.getenv("RPC_URL")


async def main() -> int:
    if not SENDER_PRIVATE_KEY or not RECIPIENT_ADDRESS:
        print("Set SENDER_PRIVATE_KEY and RECIPIENT_ADDRESS in .env")
        return 1

    configure_logging(logging.INFO)
    client = EthereumClient(
        Network.SEPOLIA,
        rpc_url=RPC_URL,
        tracker_config=TrackerConfig(poll_interval=5.0, timeout=600.0),
    )

    price = await client.gas.estimate_price(GasPriceTarget.FAST)
    print(f"Fast gas price: {readable_gas_price(price)} gwei")

    tracker = await client.send_ether(
        SENDER_PRIVATE_KEY,
        RECIPIENT_ADDRESS,
        AMOUNT_ETH,
        gas_price=price,
    )
    tracker.on_success(lambda outcome: print(f"{outcome.message} ({outcome.tx_hash})"))
    tracker.on_error(lambda error: print(f"Transfer failed [{error.code}]: {error}"))

    try:
        await tracker.wait()
    except EthereumError:
        return 1

    balance = await client.get_ether_balance(RECIPIENT_ADDRESS).wait()
    print(f"Recipient balance: {balance} ETH")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
