"""
Tests for chunked uploads.

Tests cover:
- Size bounds checked before any I/O
- Chunk planning against node limits
- Concurrent chunk delivery and finalization
- Transient chunk failures
- Resuming a failed session, including with a new chunk size
- Session expiry and finalize errors
"""

import math
import os
import time

import httpx
import pytest

from irys_client import IrysClient, IrysConfig
from irys_client.chunking import SESSION_TIMEOUT_SECONDS
from irys_client.errors import (
    ChunkUploadFailedError,
    InsufficientBalanceError,
    SessionExpiredError,
    SizeOutOfRangeError,
)

from tests.fake_node import CURRENCY, FakeCurrency, FakeNode, override

MIB = 1024 * 1024


async def create_client(node: FakeNode, config: IrysConfig, **updates) -> IrysClient:
    config = config.model_copy(update=updates)
    return await IrysClient.create(FakeCurrency(node), config, transport=node.transport())


async def failed_session(client: IrysClient, node: FakeNode, payload: bytes, offset: int) -> str:
    """Run an upload whose chunk at `offset` keeps failing; return the session id."""
    node.chunk_failures[offset] = 100
    with pytest.raises(ChunkUploadFailedError) as exc_info:
        await client.chunk_upload(payload)
    node.chunk_failures.clear()
    return exc_info.value.session_id


# =============================================================================
# Size Bounds
# =============================================================================


class TestSizeBounds:
    """Tests for payload size validation."""

    @pytest.mark.asyncio
    async def test_too_small_no_io(self, client: IrysClient, node: FakeNode) -> None:
        before = len(node.requests)
        with pytest.raises(SizeOutOfRangeError):
            await client.chunk_upload(b"x" * 100)
        assert len(node.requests) == before

    @pytest.mark.asyncio
    async def test_too_large_no_io(self, client: IrysClient, node: FakeNode) -> None:
        before = len(node.requests)
        with pytest.raises(SizeOutOfRangeError) as exc_info:
            await client.chunk_upload(bytes(95 * MIB + 1))
        assert exc_info.value.size == 95 * MIB + 1
        assert len(node.requests) == before


# =============================================================================
# Happy Path
# =============================================================================


class TestChunkUpload:
    """Tests for chunked upload end to end."""

    @pytest.mark.asyncio
    async def test_ten_mib_in_one_mib_chunks(
        self, node: FakeNode, config: IrysConfig
    ) -> None:
        payload = os.urandom(10 * MIB)
        tags = [("Content-Type", "application/octet-stream")]
        client = await create_client(node, config, chunk_size=MIB)
        try:
            tx = await client.chunk_upload(payload, tags)
            signed = client.sign(payload, tags)
        finally:
            await client.close()

        # Chunks tile the signed item, header included
        assert node.chunk_acks == math.ceil(signed.size / MIB)
        assert node.chunk_acks == 11
        assert tx.id == signed.id
        assert node.uploads[tx.id].item.data == payload
        assert node.sessions == {}

    @pytest.mark.asyncio
    async def test_session_declares_total_size(self, client: IrysClient, node: FakeNode) -> None:
        payload = os.urandom(600_000)
        await client.chunk_upload(payload)

        create = next(r for r in node.requests if r.url.path.endswith("/-1/-1"))
        assert create.headers["x-total-size"] == str(client.sign(payload).size)

    @pytest.mark.asyncio
    async def test_defaults_to_node_max_chunk(self, config: IrysConfig) -> None:
        node = FakeNode(chunk_max=600_000)
        client = await create_client(node, config)
        try:
            await client.chunk_upload(os.urandom(1_000_000))
        finally:
            await client.close()

        assert node.chunk_acks == 2

    @pytest.mark.asyncio
    async def test_chunk_size_clamped_to_node_min(self, config: IrysConfig) -> None:
        node = FakeNode(chunk_min=256 * 1024)
        client = await create_client(node, config, chunk_size=100)
        try:
            await client.chunk_upload(os.urandom(600_000))
        finally:
            await client.close()

        assert node.chunk_acks == 3

    @pytest.mark.asyncio
    async def test_concurrency_of_one(self, node: FakeNode, config: IrysConfig) -> None:
        client = await create_client(node, config, chunk_size=MIB, max_concurrency=1)
        try:
            tx = await client.chunk_upload(os.urandom(3 * MIB))
        finally:
            await client.close()

        assert tx.id in node.uploads
        assert node.chunk_acks == 4

    @pytest.mark.asyncio
    async def test_transient_chunk_failure_retried(
        self, node: FakeNode, config: IrysConfig
    ) -> None:
        client = await create_client(node, config, chunk_size=MIB)
        node.chunk_failures[MIB] = config.max_retries - 1
        try:
            tx = await client.chunk_upload(os.urandom(3_000_000))
        finally:
            await client.close()

        assert tx.id in node.uploads
        assert node.chunk_acks == 3


# =============================================================================
# Failures & Resume
# =============================================================================


class TestChunkFailures:
    """Tests for chunk errors and resumable sessions."""

    @pytest.mark.asyncio
    async def test_failed_chunk_reports_offset(
        self, node: FakeNode, config: IrysConfig
    ) -> None:
        client = await create_client(node, config, chunk_size=MIB)
        node.chunk_failures[MIB] = 100
        try:
            with pytest.raises(ChunkUploadFailedError) as exc_info:
                await client.chunk_upload(os.urandom(3_000_000))
        finally:
            await client.close()

        error = exc_info.value
        assert error.offset == MIB
        assert error.session_id in node.sessions
        assert "503" in error.reason
        # The other chunks were still delivered
        assert node.chunk_acks == 2

    @pytest.mark.asyncio
    async def test_resume_sends_only_missing_chunks(
        self, node: FakeNode, config: IrysConfig
    ) -> None:
        payload = os.urandom(3_000_000)
        client = await create_client(node, config, chunk_size=MIB)
        try:
            session_id = await failed_session(client, node, payload, 2 * MIB)
            assert node.chunk_acks == 2

            tx = await client.chunk_upload(payload, session_id=session_id)
        finally:
            await client.close()

        assert node.chunk_acks == 3
        assert node.uploads[tx.id].item.data == payload
        resumed = [r for r in node.requests if r.url.path.endswith(f"/{session_id}/-1")]
        assert [r.method for r in resumed] == ["GET", "POST"]


    @pytest.mark.asyncio
    async def test_resume_with_different_chunk_size(
        self, node: FakeNode, config: IrysConfig
    ) -> None:
        payload = os.urandom(3_000_000)
        first = await create_client(node, config, chunk_size=MIB)
        try:
            session_id = await failed_session(first, node, payload, 2 * MIB)
        finally:
            await first.close()
        assert node.chunk_acks == 2

        start = len(node.requests)
        resumed = await create_client(node, config, chunk_size=600_000)
        try:
            tx = await resumed.chunk_upload(payload, session_id=session_id)
            total_size = resumed.sign(payload).size
        finally:
            await resumed.close()

        # Only the missing tail is sent, split at the new chunk size
        sent = sorted(
            int(r.url.path.rsplit("/", 1)[1])
            for r in node.requests[start:]
            if r.method == "POST" and not r.url.path.endswith("/-1")
        )
        assert sent == [2 * MIB, 2 * MIB + 600_000]
        assert node.chunk_acks == 2 + math.ceil((total_size - 2 * MIB) / 600_000)
        assert node.uploads[tx.id].item.data == payload

    @pytest.mark.asyncio
    async def test_resume_uses_node_session_clock(self, config: IrysConfig) -> None:
        node = FakeNode()
        payload = os.urandom(3_000_000)
        client = await create_client(node, config, chunk_size=MIB)
        try:
            session_id = await failed_session(client, node, payload, 0)
        finally:
            await client.close()
        acks = node.chunk_acks

        def stale(request: httpx.Request) -> httpx.Response:
            body = node(request).json()
            body["createdAt"] = time.time() - SESSION_TIMEOUT_SECONDS - 60
            return httpx.Response(200, json=body)

        transport = override(node, f"/chunks/{CURRENCY}/{session_id}/-1", stale, method="GET")
        config = config.model_copy(update={"chunk_size": MIB})
        async with await IrysClient.create(FakeCurrency(node), config, transport=transport) as client:
            with pytest.raises(SessionExpiredError) as exc_info:
                await client.chunk_upload(payload, session_id=session_id)

        assert exc_info.value.session_id == session_id
        assert node.chunk_acks == acks

    @pytest.mark.asyncio
    async def test_resume_with_recent_node_activity(self, config: IrysConfig) -> None:
        node = FakeNode()
        payload = os.urandom(3_000_000)
        client = await create_client(node, config, chunk_size=MIB)
        try:
            session_id = await failed_session(client, node, payload, 0)
        finally:
            await client.close()

        def active(request: httpx.Request) -> httpx.Response:
            body = node(request).json()
            body["createdAt"] = time.time() - SESSION_TIMEOUT_SECONDS - 60
            body["lastActivity"] = time.time() - 60
            return httpx.Response(200, json=body)

        transport = override(node, f"/chunks/{CURRENCY}/{session_id}/-1", active, method="GET")
        config = config.model_copy(update={"chunk_size": MIB})
        async with await IrysClient.create(FakeCurrency(node), config, transport=transport) as client:
            tx = await client.chunk_upload(payload, session_id=session_id)

        assert node.uploads[tx.id].item.data == payload
    @pytest.mark.asyncio
    async def test_resume_with_different_payload_size(
        self, node: FakeNode, config: IrysConfig
    ) -> None:
        client = await create_client(node, config, chunk_size=MIB)
        try:
            session_id = await failed_session(client, node, os.urandom(3_000_000), 0)
            with pytest.raises(ChunkUploadFailedError, match="session declared"):
                await client.chunk_upload(os.urandom(2_000_000), session_id=session_id)
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_resume_expired_session(self, node: FakeNode, config: IrysConfig) -> None:
        payload = os.urandom(3_000_000)
        client = await create_client(node, config, chunk_size=MIB)
        try:
            session_id = await failed_session(client, node, payload, 0)
            node.expired_sessions.add(session_id)

            with pytest.raises(SessionExpiredError) as exc_info:
                await client.chunk_upload(payload, session_id=session_id)
        finally:
            await client.close()

        assert exc_info.value.session_id == session_id

    @pytest.mark.asyncio
    async def test_resume_unknown_session(self, client: IrysClient) -> None:
        with pytest.raises(SessionExpiredError):
            await client.chunk_upload(os.urandom(600_000), session_id="does-not-exist")

    @pytest.mark.asyncio
    async def test_session_expires_mid_upload(
        self, node: FakeNode, config: IrysConfig
    ) -> None:
        def expire(request: httpx.Request) -> httpx.Response:
            node.expired_sessions.add(request.url.path.split("/")[3])
            return node(request)

        transport = override(node, "/chunks", expire, method="POST")
        config = config.model_copy(update={"chunk_size": MIB})
        async with await IrysClient.create(FakeCurrency(node), config, transport=transport) as client:
            with pytest.raises(SessionExpiredError):
                await client.chunk_upload(os.urandom(3_000_000))

        assert node.chunk_acks == 0

    @pytest.mark.asyncio
    async def test_finalize_insufficient_balance(self, client: IrysClient, node: FakeNode) -> None:
        node.finalize_status = 402
        with pytest.raises(InsufficientBalanceError):
            await client.chunk_upload(os.urandom(600_000))

    @pytest.mark.asyncio
    async def test_finalize_rejected(self, client: IrysClient, node: FakeNode) -> None:
        node.finalize_status = 400
        with pytest.raises(ChunkUploadFailedError, match="finalize rejected"):
            await client.chunk_upload(os.urandom(600_000))
