"""
Chunked upload session model.

A session accepts disjoint `(offset, size)` chunks of a signed data item
and may be finalized only once the chunks cover `[0, total_size)` with no
gaps and no overlaps. Sessions expire 30 minutes after creation or after
the last accepted chunk.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from irys_client.errors import (
    ChunkUploadFailedError,
    SessionExpiredError,
    SizeOutOfRangeError,
)

SESSION_TIMEOUT_SECONDS = 30 * 60

MIN_CHUNKED_SIZE = 500 * 1024
"""Smallest payload accepted by chunked upload (500 KiB)."""

MAX_CHUNKED_SIZE = 95 * 1024 * 1024
"""Largest payload accepted by chunked upload (95 MiB)."""


class SessionStatus(Enum):
    """Chunk session lifecycle states."""

    ACTIVE = "active"
    COMPLETED = "completed"
    EXPIRED = "expired"


def check_chunked_size(
    size: int,
    min_size: int = MIN_CHUNKED_SIZE,
    max_size: int = MAX_CHUNKED_SIZE,
) -> None:
    """
    Raises:
        SizeOutOfRangeError: If `size` is outside `[min_size, max_size]`
    """
    if size < min_size or size > max_size:
        raise SizeOutOfRangeError(size, min_size=min_size, max_size=max_size)


def plan_chunks(total_size: int, chunk_size: int) -> List[Tuple[int, int]]:
    """Split `[0, total_size)` into `(offset, size)` chunks of `chunk_size`."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    return [
        (offset, min(chunk_size, total_size - offset))
        for offset in range(0, total_size, chunk_size)
    ]


def check_coverage(
    chunks: Iterable[Tuple[int, int]],
    total_size: int,
    *,
    session_id: Optional[str] = None,
) -> None:
    """
    Verify that chunks tile `[0, total_size)` exactly.

    Raises:
        ChunkUploadFailedError: At the offset of the first gap or overlap
    """
    cursor = 0
    for offset, size in sorted(chunks):
        if offset > cursor:
            raise ChunkUploadFailedError(
                cursor,
                session_id=session_id,
                reason=f"gap of {offset - cursor} bytes",
            )
        if offset < cursor:
            raise ChunkUploadFailedError(
                offset,
                session_id=session_id,
                reason=f"overlap of {cursor - offset} bytes",
            )
        cursor = offset + size

    if cursor != total_size:
        reason = (
            f"missing {total_size - cursor} trailing bytes"
            if cursor < total_size
            else f"{cursor - total_size} bytes past declared size"
        )
        raise ChunkUploadFailedError(
            min(cursor, total_size),
            session_id=session_id,
            reason=reason,
        )


@dataclass
class ChunkSession:
    """
    Client-side view of a node chunk session.

    Example:
        ```python
        session = ChunkSession(id="abc", total_size=3_000_000, chunk_size=1_000_000)
        for offset, size in session.pending_chunks():
            ...
            session.record_chunk(offset, size)
        session.complete()
        ```
    """

    id: str
    total_size: int
    chunk_size: int
    created_at: float = field(default_factory=time.time)
    last_activity: Optional[float] = None
    received: Dict[int, int] = field(default_factory=dict)
    completed: bool = False
    timeout: float = SESSION_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if self.last_activity is None:
            self.last_activity = self.created_at
        if self.total_size <= 0:
            raise ValueError("total_size must be positive")
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")

    @property
    def expires_at(self) -> float:
        return self.last_activity + self.timeout

    def status(self, now: Optional[float] = None) -> SessionStatus:
        if self.completed:
            return SessionStatus.COMPLETED
        if self.is_expired(now):
            return SessionStatus.EXPIRED
        return SessionStatus.ACTIVE

    def is_expired(self, now: Optional[float] = None) -> bool:
        now = time.time() if now is None else now
        return not self.completed and now >= self.expires_at

    def ensure_active(self, now: Optional[float] = None) -> None:
        """
        Raises:
            SessionExpiredError: If the session timed out
            ChunkUploadFailedError: If the session is already completed
        """
        if self.completed:
            raise ChunkUploadFailedError(
                0, session_id=self.id, reason="session already completed"
            )
        if self.is_expired(now):
            raise SessionExpiredError(self.id)

    @property
    def received_bytes(self) -> int:
        return sum(self.received.values())

    def record_chunk(self, offset: int, size: int, now: Optional[float] = None) -> None:
        """
        Register an acknowledged chunk and refresh the expiry.

        Raises:
            SessionExpiredError: If the session timed out
            ChunkUploadFailedError: If the chunk is out of bounds or overlaps
        """
        self.ensure_active(now)
        if offset < 0 or size <= 0 or offset + size > self.total_size:
            raise ChunkUploadFailedError(
                offset,
                session_id=self.id,
                reason=f"chunk of {size} bytes out of bounds",
            )
        for other_offset, other_size in self.received.items():
            if offset < other_offset + other_size and other_offset < offset + size:
                raise ChunkUploadFailedError(
                    offset,
                    session_id=self.id,
                    reason=f"overlaps chunk at {other_offset}",
                )
        self.received[offset] = size
        self.last_activity = time.time() if now is None else now

    def missing_ranges(self) -> List[Tuple[int, int]]:
        """Uncovered `(offset, size)` ranges of `[0, total_size)`, in offset order."""
        gaps = []
        cursor = 0
        for offset, size in sorted(self.received.items()):
            if offset > cursor:
                gaps.append((cursor, offset - cursor))
            cursor = max(cursor, offset + size)
        if cursor < self.total_size:
            gaps.append((cursor, self.total_size - cursor))
        return gaps

    def pending_chunks(self) -> List[Tuple[int, int]]:
        """
        Chunks still to send, in offset order.

        Each uncovered range is split into pieces of at most `chunk_size`,
        so a resumed session never overlaps chunks the node already holds,
        even when they were sent with a different chunk size.
        """
        return [
            (gap_offset + offset, size)
            for gap_offset, gap_size in self.missing_ranges()
            for offset, size in plan_chunks(gap_size, self.chunk_size)
        ]

    def verify_complete(self) -> None:
        """
        Raises:
            ChunkUploadFailedError: On any gap or overlap
        """
        check_coverage(self.received.items(), self.total_size, session_id=self.id)

    def complete(self, now: Optional[float] = None) -> None:
        """Mark the session finalized after checking coverage."""
        self.ensure_active(now)
        self.verify_complete()
        self.completed = True
