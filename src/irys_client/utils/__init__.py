"""
Irys Client Utilities.
"""

from irys_client.utils.logging import (
    configure_logging,
    disable_logging,
    enable_debug,
    get_logger,
    set_level,
)
from irys_client.utils.retry import (
    RetryConfig,
    TransientError,
    calculate_delay,
    retry_async,
)

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_level",
    "disable_logging",
    "enable_debug",
    # Retry
    "RetryConfig",
    "TransientError",
    "calculate_delay",
    "retry_async",
]
