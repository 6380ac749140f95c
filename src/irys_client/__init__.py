"""
Irys Python Client - pay-per-byte permanent storage.

Quick Start:
    >>> import asyncio
    >>> from irys_client import IrysClient, IrysConfig, Matic
    >>>
    >>> async def main():
    ...     currency = Matic(private_key="0x...")
    ...     async with await IrysClient.create(currency, IrysConfig(node="devnet")) as client:
    ...         tx = await client.basic_upload(b"hello", [("Content-Type", "text/plain")])
    ...         print(f"Uploaded: {tx.id}")
    ...
    >>> asyncio.run(main())

Modules:
- `client`: IrysClient (price, balance, funding, upload, retrieval)
- `bundles`: ANS-104 data item codec and signing
- `chunking`: chunk session model for resumable uploads
- `currency`: currency providers and signers
- `transport`: retrying httpx transport
- `errors`: exception hierarchy
- `utils`: logging and retry helpers
"""

from irys_client.version import __version__, __version_info__

from irys_client.bundles import (
    DataItem,
    SignedTransaction,
    create_data_item,
    parse_data_item,
    sign_data_item,
    sign_payload,
)
from irys_client.chunking import (
    MAX_CHUNKED_SIZE,
    MIN_CHUNKED_SIZE,
    SESSION_TIMEOUT_SECONDS,
    ChunkSession,
    SessionStatus,
)
from irys_client.client import IrysClient
from irys_client.currency import (
    Arbitrum,
    BaseEth,
    Currency,
    Ethereum,
    EthereumSigner,
    EvmCurrency,
    Matic,
    Signer,
)
from irys_client.errors import (
    BadResponseError,
    ChunkError,
    ChunkUploadFailedError,
    ConfirmationFailedError,
    FundingError,
    FundingFailedError,
    InsufficientBalanceError,
    InvalidCurrencyError,
    IrysError,
    NetworkError,
    RequestCancelledError,
    SessionExpiredError,
    SigningFailedError,
    SizeOutOfRangeError,
)
from irys_client.transport import RetryTransport
from irys_client.types import (
    DEFAULT_GATEWAY,
    IRYS_NODES,
    File,
    IrysConfig,
    NodeInfo,
    Receipt,
    Tag,
    Transaction,
)

__all__ = [
    # Version
    "__version__",
    "__version_info__",
    # Client
    "IrysClient",
    "IrysConfig",
    "IRYS_NODES",
    "DEFAULT_GATEWAY",
    "RetryTransport",
    # Types
    "Tag",
    "Transaction",
    "Receipt",
    "NodeInfo",
    "File",
    # Bundles
    "DataItem",
    "SignedTransaction",
    "create_data_item",
    "sign_data_item",
    "sign_payload",
    "parse_data_item",
    # Chunking
    "ChunkSession",
    "SessionStatus",
    "MIN_CHUNKED_SIZE",
    "MAX_CHUNKED_SIZE",
    "SESSION_TIMEOUT_SECONDS",
    # Currency
    "Currency",
    "EvmCurrency",
    "Matic",
    "Ethereum",
    "BaseEth",
    "Arbitrum",
    "Signer",
    "EthereumSigner",
    # Errors
    "IrysError",
    "NetworkError",
    "BadResponseError",
    "InvalidCurrencyError",
    "InsufficientBalanceError",
    "RequestCancelledError",
    "FundingError",
    "FundingFailedError",
    "ConfirmationFailedError",
    "SigningFailedError",
    "ChunkError",
    "SizeOutOfRangeError",
    "SessionExpiredError",
    "ChunkUploadFailedError",
]
