"""
Tests for the retrying HTTP transport.

Tests cover:
- Retry on 429/5xx responses
- Retry on connection errors
- Passthrough of non-retryable statuses
- Final response returned unchanged after the last attempt
- Backoff schedule
"""

from typing import List
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from irys_client.transport import RETRY_STATUS_CODES, RetryTransport
from irys_client.utils.retry import RetryConfig, TransientError


def sequence_transport(statuses: List[int], calls: List[httpx.Request]) -> httpx.MockTransport:
    """Answer with each status in turn, repeating the last one."""

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        status = statuses[min(len(calls), len(statuses)) - 1]
        return httpx.Response(status, text=f"attempt {len(calls)}")

    return httpx.MockTransport(handler)


async def get(transport: httpx.AsyncBaseTransport) -> httpx.Response:
    async with httpx.AsyncClient(transport=transport) as client:
        return await client.get("https://node.test/info")


FAST = RetryConfig(max_attempts=5, base_delay_ms=0, max_delay_ms=0)


class TestRetryTransport:
    """Tests for RetryTransport."""

    def test_retry_statuses(self) -> None:
        assert RETRY_STATUS_CODES == {429, 500, 502, 503, 504}

    def test_config_only_retries_transport_errors(self) -> None:
        transport = RetryTransport(httpx.MockTransport(lambda r: httpx.Response(200)), FAST)
        assert transport.config.retryable_errors == (httpx.TransportError, TransientError)
        assert transport.config.max_attempts == 5

    @pytest.mark.asyncio
    async def test_success_no_retry(self) -> None:
        calls: List[httpx.Request] = []
        response = await get(RetryTransport(sequence_transport([200], calls), FAST))

        assert response.status_code == 200
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_retries_service_unavailable(self) -> None:
        calls: List[httpx.Request] = []
        response = await get(RetryTransport(sequence_transport([503, 429, 200], calls), FAST))

        assert response.status_code == 200
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self) -> None:
        calls: List[httpx.Request] = []
        response = await get(RetryTransport(sequence_transport([404], calls), FAST))

        assert response.status_code == 404
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_last_response_returned(self) -> None:
        calls: List[httpx.Request] = []
        response = await get(RetryTransport(sequence_transport([502], calls), FAST))

        assert response.status_code == 502
        assert response.text == "attempt 5"
        assert len(calls) == 5

    @pytest.mark.asyncio
    async def test_connection_error_retried(self) -> None:
        calls: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) < 3:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200)

        response = await get(RetryTransport(httpx.MockTransport(handler), FAST))

        assert response.status_code == 200
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_connection_error_exhausted(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(httpx.ConnectError):
            await get(RetryTransport(httpx.MockTransport(handler), FAST))

    @pytest.mark.asyncio
    async def test_default_backoff_schedule(self) -> None:
        calls: List[httpx.Request] = []
        transport = RetryTransport(sequence_transport([500], calls))

        with patch("irys_client.utils.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            response = await get(transport)

        assert response.status_code == 500
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0, 4.0, 8.0]

    @pytest.mark.asyncio
    async def test_request_body_resent(self) -> None:
        bodies: List[bytes] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(request.content)
            return httpx.Response(503 if len(bodies) == 1 else 200)

        async with httpx.AsyncClient(transport=RetryTransport(httpx.MockTransport(handler), FAST)) as client:
            response = await client.post("https://node.test/tx/matic", content=b"payload")

        assert response.status_code == 200
        assert bodies == [b"payload", b"payload"]
