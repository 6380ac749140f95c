"""
Funding workflow exceptions.

A failed broadcast is never retried automatically; a failed confirmation
carries the broadcast hash so the caller can confirm it again manually.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from irys_client.errors.base import IrysError


class FundingError(IrysError):
    """Base exception for funding operations."""

    def __init__(
        self,
        message: str,
        *,
        amount: Optional[int] = None,
        currency: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if amount is not None:
            details["amount"] = amount
        if currency:
            details["currency"] = currency

        super().__init__(message, code="FUNDING_ERROR", details=details)
        self.amount = amount
        self.currency = currency


class FundingFailedError(FundingError):
    """
    Raised when the funding transaction could not be built or broadcast.

    Example:
        >>> raise FundingFailedError("nonce too low", amount=50, currency="matic")
    """

    def __init__(
        self,
        reason: str,
        *,
        amount: Optional[int] = None,
        currency: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            f"Funding transaction failed: {reason}",
            amount=amount,
            currency=currency,
            details=details,
        )
        self.code = "FUNDING_FAILED"
        self.reason = reason


class ConfirmationFailedError(FundingError):
    """
    Raised when the node rejects confirmation of a broadcast funding transaction.

    Example:
        >>> raise ConfirmationFailedError("0xabc...", status_code=400)
    """

    def __init__(
        self,
        tx_hash: str,
        *,
        status_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        amount: Optional[int] = None,
        currency: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        details["tx_hash"] = tx_hash
        if status_code is not None:
            details["status_code"] = status_code
        if endpoint:
            details["endpoint"] = endpoint

        message = f"Node rejected funding confirmation for {tx_hash}"
        if status_code is not None:
            message += f": HTTP {status_code}"

        super().__init__(message, amount=amount, currency=currency, details=details)
        self.code = "CONFIRMATION_FAILED"
        self.tx_hash = tx_hash
        self.status_code = status_code
        self.endpoint = endpoint
