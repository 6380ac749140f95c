"""
Resilient HTTP transport.

`RetryTransport` decorates any `httpx.AsyncBaseTransport` with exponential
backoff. Connection errors and 429/5xx responses are retried; retry state
is local to each request. Tests swap the inner transport for an
`httpx.MockTransport`.
"""

from __future__ import annotations

import logging
from typing import FrozenSet, Optional

import httpx

from irys_client.utils.logging import get_logger
from irys_client.utils.retry import RetryConfig, TransientError, retry_async

_logger = get_logger(__name__)

RETRY_STATUS_CODES: FrozenSet[int] = frozenset({429, 500, 502, 503, 504})


class RetryTransport(httpx.AsyncBaseTransport):
    """
    Retrying transport decorator.

    On the last attempt a retryable status response is returned to the
    caller unchanged so that the status code can be reported.

    Example:
        ```python
        transport = RetryTransport(
            httpx.AsyncHTTPTransport(),
            RetryConfig(max_attempts=5, base_delay_ms=1000, max_delay_ms=30000),
        )
        client = httpx.AsyncClient(transport=transport)
        ```
    """

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        config: Optional[RetryConfig] = None,
        *,
        logger: Optional[logging.Logger] = None,
        debug: bool = False,
    ) -> None:
        self._transport = transport or httpx.AsyncHTTPTransport()
        base = config or RetryConfig()
        self._config = RetryConfig(
            max_attempts=base.max_attempts,
            base_delay_ms=base.base_delay_ms,
            max_delay_ms=base.max_delay_ms,
            jitter=base.jitter,
            exponential_base=base.exponential_base,
            retryable_errors=(httpx.TransportError, TransientError),
        )
        self._logger = logger or _logger
        self._debug = debug

    @property
    def config(self) -> RetryConfig:
        return self._config

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        attempts = 0

        async def attempt() -> httpx.Response:
            nonlocal attempts
            attempts += 1
            response = await self._transport.handle_async_request(request)
            if (
                response.status_code in RETRY_STATUS_CODES
                and attempts < self._config.max_attempts
            ):
                await response.aclose()
                raise TransientError(
                    f"{request.method} {request.url}: HTTP {response.status_code}",
                    status_code=response.status_code,
                )
            return response

        def on_retry(attempt_no: int, error: Exception, delay: float) -> None:
            if self._debug:
                self._logger.debug(
                    "Retrying %s %s after %.2fs (attempt %d/%d): %s",
                    request.method,
                    request.url,
                    delay,
                    attempt_no,
                    self._config.max_attempts,
                    error,
                )

        return await retry_async(attempt, self._config, on_retry=on_retry)

    async def aclose(self) -> None:
        await self._transport.aclose()
