#!/usr/bin/env python3
"""
Example: read ERC20 token details and a balance

Usage:
    python examples/token_balance.py

Environment Variables:
    TOKEN_ADDRESS: Mainnet ERC20 contract (default: DAI)
    OWNER_ADDRESS: Address whose balance is read
    RPC_URL: Mainnet RPC URL (default: public node)
"""

import asyncio
import os
import sys

from dotenv import load_dotenv

from hope_ethereum import ERC20, EthereumClient, EthereumError, Network

load_dotenv()

TOKEN_ADDRESS = os.getenv("TOKEN_ADDRESS", "0x6B175474E89094C44Da98b954EedeAC495271d0F")
OWNER_ADDRESS = os.getenv("OWNER_ADDRESS", "")
RPC_URL = os.getenv("RPC_URL")


async def main() -> int:
    if not OWNER_ADDRESS:
        print("Set OWNER_ADDRESS in .env")
        return 1

    client = EthereumClient(Network.MAINNET, rpc_url=RPC_URL)
    token = ERC20(client, TOKEN_ADDRESS)

    try:
        await token.load_details().wait(timeout=30)
        balance = await token.query_balance_of(OWNER_ADDRESS).wait(timeout=30)
    except EthereumError as e:
        print(f"Read failed [{e.code}]: {e}")
        return 1

    print(f"{token.name} ({token.symbol}), {token.decimals} decimals")
    print(f"Balance of {OWNER_ADDRESS}: {balance} {token.symbol}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
