"""
Network-level exceptions raised while talking to an Irys node or gateway.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from irys_client.errors.base import IrysError


class NetworkError(IrysError):
    """
    Raised on transport failures and unexpected HTTP status codes.

    Example:
        >>> raise NetworkError("Node unavailable", endpoint="/price", status_code=503)
    """

    def __init__(
        self,
        message: str,
        *,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if endpoint:
            details["endpoint"] = endpoint
        if status_code is not None:
            details["status_code"] = status_code

        super().__init__(message, code="NETWORK_ERROR", details=details)
        self.endpoint = endpoint
        self.status_code = status_code


class BadResponseError(IrysError):
    """
    Raised when a response body is malformed or has an unexpected shape.

    Example:
        >>> raise BadResponseError("Price is not an integer", endpoint="/price/matic/10")
    """

    def __init__(
        self,
        message: str,
        *,
        endpoint: Optional[str] = None,
        body: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if endpoint:
            details["endpoint"] = endpoint
        if body is not None:
            # Keep error payloads small
            details["body"] = body[:256]

        super().__init__(message, code="BAD_RESPONSE", details=details)
        self.endpoint = endpoint


class InvalidCurrencyError(IrysError):
    """
    Raised when the node does not support the selected currency.

    Example:
        >>> raise InvalidCurrencyError("solana", endpoint="https://node1.irys.xyz")
    """

    def __init__(
        self,
        currency: str,
        *,
        endpoint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        details["currency"] = currency
        if endpoint:
            details["endpoint"] = endpoint

        super().__init__(
            f"Currency not supported by node: {currency}",
            code="INVALID_CURRENCY",
            details=details,
        )
        self.currency = currency
        self.endpoint = endpoint


class InsufficientBalanceError(NetworkError):
    """
    Raised when the node rejects an upload because the balance is too low.

    Example:
        >>> raise InsufficientBalanceError(endpoint="/tx/matic")
    """

    def __init__(
        self,
        message: str = "Node rejected upload: insufficient balance",
        *,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = 402,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message,
            endpoint=endpoint,
            status_code=status_code,
            details=details,
        )
        self.code = "INSUFFICIENT_BALANCE"


class RequestCancelledError(IrysError):
    """
    Raised when an operation exceeds the deadline supplied by the caller.

    Task cancellation itself propagates as asyncio.CancelledError.

    Example:
        >>> raise RequestCancelledError("get_price", timeout=5.0)
    """

    def __init__(
        self,
        operation: str,
        *,
        timeout: Optional[float] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        details["operation"] = operation
        if timeout is not None:
            details["timeout_s"] = timeout

        message = f"Operation cancelled: {operation}"
        if timeout is not None:
            message += f" (deadline {timeout}s exceeded)"

        super().__init__(message, code="CANCELLED", details=details)
        self.operation = operation
        self.timeout = timeout
