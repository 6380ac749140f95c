#!/usr/bin/env python3
"""
Retrieval Example

Prints transaction metadata and receipt, then downloads the data.

Usage:
    python examples/metadata.py <tx_id> [output_path]

Environment Variables:
    IRYS_PRIVATE_KEY: Wallet private key (hex)
    IRYS_NODE: Node name or URL (default: devnet)
"""

import asyncio
import os
import sys

from dotenv import load_dotenv

from irys_client import IrysClient, IrysConfig, Matic

load_dotenv()

PRIVATE_KEY = os.getenv("IRYS_PRIVATE_KEY", "")


async def main(tx_id: str, output: str) -> None:
    if not PRIVATE_KEY:
        sys.exit("IRYS_PRIVATE_KEY is not set")

    config = IrysConfig.from_env(node=os.getenv("IRYS_NODE", "devnet"))

    async with await IrysClient.create(Matic(PRIVATE_KEY), config) as client:
        meta = await client.get_metadata(tx_id)
        print(f"Transaction: {meta.id}")
        print(f"Currency:    {meta.currency}")
        for tag in meta.tags:
            print(f"  {tag.name}: {tag.value}")

        receipt = await client.get_receipt(tx_id)
        if receipt.is_empty:
            print("Receipt:     not indexed yet")
        else:
            print(f"Receipt:     deadline height {receipt.deadline_height}")

        written = 0
        async with await client.download(tx_id) as file:
            with open(output, "wb") as sink:
                async for chunk in file.iter_bytes():
                    sink.write(chunk)
                    written += len(chunk)
        print(f"Downloaded {written} bytes to {output}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        sys.exit(__doc__)
    asyncio.run(main(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else sys.argv[1]))
