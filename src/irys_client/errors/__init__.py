"""
Exception hierarchy for the Irys client.

    IrysError
    ├── NetworkError
    │   └── InsufficientBalanceError
    ├── BadResponseError
    ├── InvalidCurrencyError
    ├── RequestCancelledError
    ├── FundingError
    │   ├── FundingFailedError
    │   └── ConfirmationFailedError
    ├── SigningFailedError
    └── ChunkError
        ├── SizeOutOfRangeError
        ├── SessionExpiredError
        └── ChunkUploadFailedError
"""

from irys_client.errors.base import IrysError
from irys_client.errors.funding import (
    ConfirmationFailedError,
    FundingError,
    FundingFailedError,
)
from irys_client.errors.network import (
    BadResponseError,
    InsufficientBalanceError,
    InvalidCurrencyError,
    NetworkError,
    RequestCancelledError,
)
from irys_client.errors.upload import (
    ChunkError,
    ChunkUploadFailedError,
    SessionExpiredError,
    SigningFailedError,
    SizeOutOfRangeError,
)

__all__ = [
    "IrysError",
    # Network
    "NetworkError",
    "BadResponseError",
    "InvalidCurrencyError",
    "InsufficientBalanceError",
    "RequestCancelledError",
    # Funding
    "FundingError",
    "FundingFailedError",
    "ConfirmationFailedError",
    # Upload
    "SigningFailedError",
    "ChunkError",
    "SizeOutOfRangeError",
    "SessionExpiredError",
    "ChunkUploadFailedError",
]
