#!/usr/bin/env python3
"""
Price & Balance Example

Quotes the price of a payload size and shows the wallet's prepaid balance.

Usage:
    python examples/price.py [size_bytes]

Environment Variables:
    IRYS_PRIVATE_KEY: Wallet private key (hex)
    IRYS_NODE: Node name or URL (default: devnet)
    IRYS_RPC_URL: Polygon RPC URL (default: public endpoint)
"""

import asyncio
import os
import sys

from dotenv import load_dotenv

from irys_client import IrysClient, IrysConfig, Matic

load_dotenv()

PRIVATE_KEY = os.getenv("IRYS_PRIVATE_KEY", "")
RPC_URL = os.getenv("IRYS_RPC_URL", Matic.DEFAULT_RPC)


async def main(size: int) -> None:
    if not PRIVATE_KEY:
        sys.exit("IRYS_PRIVATE_KEY is not set")

    currency = Matic(PRIVATE_KEY, rpc_url=RPC_URL)
    config = IrysConfig.from_env(node=os.getenv("IRYS_NODE", "devnet"))

    print("=" * 60)
    print("IRYS - Price & Balance")
    print("=" * 60)

    async with await IrysClient.create(currency, config) as client:
        price = await client.get_price(size)
        balance = await client.get_balance()

        print(f"Node:            {client.node_url}")
        print(f"Wallet:          {client.address}")
        print(f"Funding address: {client.funding_address}")
        print(f"Price ({size} bytes): {price}")
        print(f"Balance:         {balance}")
        print(f"Funded:          {'yes' if balance >= price else 'no'}")


if __name__ == "__main__":
    asyncio.run(main(int(sys.argv[1]) if len(sys.argv) > 1 else 1024))
