"""
Signing and chunked upload exceptions.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from irys_client.errors.base import IrysError


class SigningFailedError(IrysError):
    """
    Raised when a data item cannot be encoded or the signer rejects it.

    Example:
        >>> raise SigningFailedError("too many tags (129 > 128)")
    """

    def __init__(
        self,
        reason: str,
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            f"Signing failed: {reason}",
            code="SIGNING_FAILED",
            details=details,
        )
        self.reason = reason


class ChunkError(IrysError):
    """Base exception for the chunked upload protocol."""

    def __init__(
        self,
        message: str,
        *,
        session_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if session_id:
            details["session_id"] = session_id

        super().__init__(message, code="CHUNK_ERROR", details=details)
        self.session_id = session_id


class SizeOutOfRangeError(ChunkError):
    """
    Raised when a payload is outside the chunked upload size window.

    Example:
        >>> raise SizeOutOfRangeError(1024, min_size=512000, max_size=99614720)
    """

    def __init__(
        self,
        size: int,
        *,
        min_size: int,
        max_size: int,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        details["size_bytes"] = size
        details["min_size_bytes"] = min_size
        details["max_size_bytes"] = max_size

        super().__init__(
            f"Payload size {size} outside chunked upload range "
            f"[{min_size}, {max_size}]",
            details=details,
        )
        self.code = "SIZE_OUT_OF_RANGE"
        self.size = size
        self.min_size = min_size
        self.max_size = max_size


class SessionExpiredError(ChunkError):
    """
    Raised when a chunk session is referenced after it expired.

    The caller must restart the upload without a session id.

    Example:
        >>> raise SessionExpiredError("a1b2c3")
    """

    def __init__(
        self,
        session_id: str,
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            f"Chunk session expired: {session_id}",
            session_id=session_id,
            details=details,
        )
        self.code = "SESSION_EXPIRED"


class ChunkUploadFailedError(ChunkError):
    """
    Raised when a chunk could not be delivered, or the session cannot be finalized.

    The session stays resumable: pass `session_id` back to `chunk_upload`.

    Example:
        >>> raise ChunkUploadFailedError(1048576, session_id="a1b2c3", reason="HTTP 503")
    """

    def __init__(
        self,
        offset: int,
        *,
        session_id: Optional[str] = None,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        details["offset"] = offset
        if reason:
            details["reason"] = reason

        message = f"Chunk upload failed at offset {offset}"
        if reason:
            message += f" ({reason})"

        super().__init__(message, session_id=session_id, details=details)
        self.code = "CHUNK_UPLOAD_FAILED"
        self.offset = offset
        self.reason = reason
