#!/usr/bin/env python3
"""
Upload Example

Uploads a file, funding the node balance first if needed. Files of
500 KiB or more are sent as a resumable chunk session.

Usage:
    python examples/upload.py <path> [content_type]

Environment Variables:
    IRYS_PRIVATE_KEY: Wallet private key (hex)
    IRYS_NODE: Node name or URL (default: devnet)
    IRYS_RPC_URL: Polygon RPC URL (default: public endpoint)
    IRYS_DEBUG: Set to 1 for verbose client logging
"""

import asyncio
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from irys_client import (
    MIN_CHUNKED_SIZE,
    ChunkUploadFailedError,
    IrysClient,
    IrysConfig,
    Matic,
)
from irys_client.utils import configure_logging

load_dotenv()

PRIVATE_KEY = os.getenv("IRYS_PRIVATE_KEY", "")
RPC_URL = os.getenv("IRYS_RPC_URL", Matic.DEFAULT_RPC)


async def main(path: Path, content_type: str) -> None:
    if not PRIVATE_KEY:
        sys.exit("IRYS_PRIVATE_KEY is not set")

    config = IrysConfig.from_env(node=os.getenv("IRYS_NODE", "devnet"))
    if config.debug:
        configure_logging("DEBUG")

    data = path.read_bytes()
    tags = [("Content-Type", content_type), ("File-Name", path.name)]
    currency = Matic(PRIVATE_KEY, rpc_url=RPC_URL)

    async with await IrysClient.create(currency, config) as client:
        if len(data) < MIN_CHUNKED_SIZE:
            tx = await client.basic_upload(data, tags)
        else:
            price = await client.get_price(len(data))
            funding_tx = await client.ensure_funded(price)
            if funding_tx:
                print(f"Funded balance: {funding_tx}")
            try:
                tx = await client.chunk_upload(data, tags)
            except ChunkUploadFailedError as e:
                print(f"Chunk {e.offset} failed, resuming session {e.session_id}")
                tx = await client.chunk_upload(data, tags, session_id=e.session_id)

        print(f"Uploaded {len(data)} bytes")
        print(f"Transaction: {tx.id}")
        print(f"URL:         {config.gateway}/{tx.id}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        sys.exit(__doc__)
    asyncio.run(main(
        Path(sys.argv[1]),
        sys.argv[2] if len(sys.argv) > 2 else "application/octet-stream",
    ))
