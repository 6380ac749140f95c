"""
Base exception class for the Irys client.

All client exceptions inherit from IrysError, which provides structured
error information including error codes, the endpoint involved, and
additional context details.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class IrysError(Exception):
    """
    Base exception for all Irys client errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code (e.g., "NETWORK_ERROR").
        details: Dictionary with additional error context.

    Example:
        >>> raise IrysError(
        ...     "Upload rejected",
        ...     code="UPLOAD_REJECTED",
        ...     details={"status_code": 400}
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "IRYS_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to a dictionary for JSON serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }
