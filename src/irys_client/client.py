"""
Irys Client - Funded Upload Orchestrator

Pay-per-byte upload client for Irys nodes:
- Quote prices and read the prepaid balance
- Top up the balance on-chain and confirm it with the node
- Sign payloads as ANS-104 data items and upload them in one request
  or as a resumable chunk session
- Download data, transaction metadata and storage receipts

The client holds no mutable state after `create()`: one immutable
configuration, the node's funding address, and a pooled HTTP client.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from typing import (
    Any,
    Awaitable,
    BinaryIO,
    Callable,
    Optional,
    Sequence,
    Type,
    TypeVar,
    Union,
)

import httpx
from pydantic import BaseModel, ValidationError

from irys_client.bundles import SignedTransaction, sign_payload
from irys_client.chunking import ChunkSession, check_chunked_size
from irys_client.currency import Currency
from irys_client.errors import (
    BadResponseError,
    ChunkUploadFailedError,
    ConfirmationFailedError,
    FundingFailedError,
    InsufficientBalanceError,
    InvalidCurrencyError,
    IrysError,
    NetworkError,
    RequestCancelledError,
    SessionExpiredError,
)
from irys_client.transport import RetryTransport
from irys_client.types import (
    BalanceResponse,
    ChunkSessionInfo,
    File,
    IrysConfig,
    NodeInfo,
    Receipt,
    TagLike,
    Transaction,
)
from irys_client.utils.logging import get_logger
from irys_client.utils.retry import RetryConfig

_logger = get_logger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

# Statuses the node uses for unknown or expired chunk sessions
SESSION_GONE_STATUSES = (404, 410)

RECEIPT_QUERY = """
query($ids: [String!]) {
    transactions(ids: $ids) {
        edges {
            node {
                receipt {
                    signature
                    timestamp
                    version
                    deadlineHeight
                }
            }
        }
    }
}
"""

Payload = Union[bytes, bytearray, memoryview, BinaryIO]


def _cancellable(
    fn: Callable[..., Awaitable[T]],
) -> Callable[..., Awaitable[T]]:
    """Add a `timeout` keyword (seconds) that bounds the whole operation."""

    @functools.wraps(fn)
    async def wrapper(self: "IrysClient", *args: Any, timeout: Optional[float] = None, **kwargs: Any) -> T:
        if timeout is None:
            return await fn(self, *args, **kwargs)
        try:
            return await asyncio.wait_for(fn(self, *args, **kwargs), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise RequestCancelledError(fn.__name__, timeout=timeout) from e

    return wrapper


def _read_payload(data: Payload) -> bytes:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    return data.read()


class IrysClient:
    """
    Upload and retrieval client bound to one node and one currency.

    Example:
        ```python
        from irys_client import IrysClient, IrysConfig, Matic

        currency = Matic(os.environ["IRYS_PRIVATE_KEY"])
        async with await IrysClient.create(currency, IrysConfig(node="devnet")) as client:
            price = await client.get_price(100_000)
            tx = await client.basic_upload(data, [("Content-Type", "image/png")])
            print(f"Uploaded {tx.id}")
        ```
    """

    def __init__(
        self,
        currency: Currency,
        config: IrysConfig,
        http_client: httpx.AsyncClient,
        funding_address: str,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Initialize the client.

        Note: Use `IrysClient.create()`, which resolves the funding address.

        Args:
            currency: Currency provider (signer + funding)
            config: Immutable client configuration
            http_client: Pooled HTTP client, owned by this instance
            funding_address: Node custodial address for the currency
            logger: Optional logger override
        """
        self._currency = currency
        self._config = config
        self._http = http_client
        self._funding_address = funding_address
        self._logger = logger or _logger
        self._closed = False

    @classmethod
    async def create(
        cls,
        currency: Currency,
        config: Optional[IrysConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "IrysClient":
        """
        Build a client and resolve the node's funding address.

        Args:
            currency: Currency provider
            config: Client configuration (defaults to mainnet)
            transport: Base HTTP transport, wrapped with retries
            logger: Optional logger override

        Raises:
            InvalidCurrencyError: If the node does not list the currency
            NetworkError: If the node cannot be reached
        """
        config = config or IrysConfig()
        log = logger or _logger
        retrying = RetryTransport(
            transport or httpx.AsyncHTTPTransport(),
            RetryConfig(
                max_attempts=config.max_retries,
                base_delay_ms=config.retry_base_delay_ms,
                max_delay_ms=config.retry_max_delay_ms,
            ),
            logger=log,
            debug=config.debug,
        )
        http_client = httpx.AsyncClient(
            transport=retrying,
            timeout=httpx.Timeout(config.timeout / 1000),
            follow_redirects=True,
        )

        try:
            info = await _fetch_node_info(http_client, config.node_url)
        except BaseException:
            await http_client.aclose()
            raise

        address = info.addresses.get(currency.name)
        if not address:
            await http_client.aclose()
            raise InvalidCurrencyError(currency.name, endpoint=config.node_url)

        client = cls(currency, config, http_client, address, logger=log)
        client._debug("set funding address %s for currency %s", address, currency.name)
        return client

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> IrysConfig:
        return self._config

    @property
    def currency(self) -> Currency:
        return self._currency

    @property
    def address(self) -> str:
        """Caller wallet address."""
        return self._currency.address

    @property
    def funding_address(self) -> str:
        """Node custodial address that receives top-ups."""
        return self._funding_address

    @property
    def node_url(self) -> str:
        return self._config.node_url

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Release pooled connections. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._http.aclose()

    async def __aenter__(self) -> "IrysClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Price & Balance
    # ------------------------------------------------------------------

    @_cancellable
    async def get_price(self, size: int) -> int:
        """
        Get the price of storing `size` bytes, in the currency's base unit.

        Raises:
            InvalidCurrencyError: If the node does not price this currency
            NetworkError: On transport failure
            BadResponseError: If the body is not a non-negative integer
        """
        if not isinstance(size, int) or size < 0:
            raise ValueError("size must be a non-negative integer")

        url = f"{self.node_url}/price/{self._currency.name}/{size}"
        response = await self._send("GET", url)
        if response.status_code in (400, 404):
            raise InvalidCurrencyError(self._currency.name, endpoint=url)
        _raise_for_status(response, url)

        text = response.text.strip().strip('"')
        try:
            price = int(text)
        except ValueError as e:
            raise BadResponseError("Price is not an integer", endpoint=url, body=text) from e
        if price < 0:
            raise BadResponseError("Price is negative", endpoint=url, body=text)

        self._debug("price for %d bytes: %d", size, price)
        return price

    @_cancellable
    async def get_balance(self) -> int:
        """
        Get the caller's prepaid balance on the node.

        Raises:
            InvalidCurrencyError: If the node does not know this currency
            NetworkError: On transport failure
            BadResponseError: On malformed body
        """
        url = f"{self.node_url}/account/balance/{self._currency.name}"
        response = await self._send("GET", url, params={"address": self.address})
        if response.status_code == 404:
            # Unknown address: nothing deposited yet
            return 0
        if response.status_code == 400:
            raise InvalidCurrencyError(self._currency.name, endpoint=url)
        _raise_for_status(response, url)

        balance = _parse_model(response, BalanceResponse, url).balance
        self._debug("balance of %s: %d", self.address, balance)
        return balance

    # ------------------------------------------------------------------
    # Funding
    # ------------------------------------------------------------------

    @_cancellable
    async def top_up_balance(self, amount: int) -> str:
        """
        Send `amount` to the node on-chain and confirm it.

        The broadcast is never retried. If confirmation fails the error
        carries the transaction hash so it can be confirmed again.

        Returns:
            Funding transaction hash

        Raises:
            FundingFailedError: If the transaction cannot be broadcast
            ConfirmationFailedError: If the node rejects the confirmation
        """
        if amount <= 0:
            raise ValueError("amount must be positive")

        currency = self._currency.name
        try:
            tx_hash = await self._currency.create_funding_tx(amount, self._funding_address)
        except FundingFailedError:
            raise
        except IrysError as e:
            raise FundingFailedError(e.message, amount=amount, currency=currency) from e
        except Exception as e:
            raise FundingFailedError(str(e), amount=amount, currency=currency) from e
        self._debug("funding transaction %s for %d sent", tx_hash, amount)

        url = f"{self.node_url}/account/balance/{currency}"
        try:
            response = await self._send("POST", url, json={"tx_id": tx_hash})
        except NetworkError as e:
            raise ConfirmationFailedError(
                tx_hash,
                endpoint=url,
                status_code=e.status_code,
                amount=amount,
                currency=currency,
            ) from e

        if not response.is_success:
            raise ConfirmationFailedError(
                tx_hash,
                endpoint=url,
                status_code=response.status_code,
                amount=amount,
                currency=currency,
            )

        self._logger.info(
            "Balance topped up",
            extra={"currency": currency, "amount": amount, "tx_hash": tx_hash},
        )
        return tx_hash

    @_cancellable
    async def ensure_funded(self, price: int) -> Optional[str]:
        """
        Top up by exactly `price` if the balance does not cover it.

        Returns:
            Funding transaction hash, or None when no top-up was needed
        """
        balance = await self.get_balance()
        if balance >= price:
            self._debug("balance %d covers price %d", balance, price)
            return None
        self._debug("balance %d below price %d, topping up", balance, price)
        return await self.top_up_balance(price)

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def sign(
        self,
        data: Payload,
        tags: Optional[Sequence[TagLike]] = None,
        *,
        target: Union[bytes, str, None] = None,
        anchor: Union[bytes, str, None] = None,
    ) -> SignedTransaction:
        """Sign `data` with the currency's signer without uploading it."""
        return sign_payload(
            _read_payload(data),
            self._currency.signer,
            tags,
            target=target,
            anchor=anchor,
        )

    async def _sign_in_thread(
        self,
        data: Payload,
        tags: Optional[Sequence[TagLike]],
        *,
        target: Union[bytes, str, None],
        anchor: Union[bytes, str, None],
    ) -> SignedTransaction:
        # Deep-hashing a large payload would otherwise stall the event loop
        return await asyncio.to_thread(self.sign, data, tags, target=target, anchor=anchor)

    @_cancellable
    async def basic_upload(
        self,
        data: Payload,
        tags: Optional[Sequence[TagLike]] = None,
        *,
        target: Union[bytes, str, None] = None,
        anchor: Union[bytes, str, None] = None,
    ) -> Transaction:
        """
        Price, fund if needed, then upload in a single request.

        Steps run strictly in order: price, balance, top-up, upload.
        """
        payload = _read_payload(data)
        price = await self.get_price(len(payload))
        await self.ensure_funded(price)
        signed = await self._sign_in_thread(payload, tags, target=target, anchor=anchor)
        return await self._upload_signed(signed)

    @_cancellable
    async def upload(
        self,
        data: Payload,
        tags: Optional[Sequence[TagLike]] = None,
        *,
        target: Union[bytes, str, None] = None,
        anchor: Union[bytes, str, None] = None,
    ) -> Transaction:
        """
        Sign and upload in a single request without checking the balance.

        Raises:
            InsufficientBalanceError: If the node rejects an unfunded upload
            SigningFailedError: If the payload cannot be signed
        """
        signed = await self._sign_in_thread(data, tags, target=target, anchor=anchor)
        return await self._upload_signed(signed)

    async def _upload_signed(self, signed: SignedTransaction) -> Transaction:
        url = f"{self.node_url}/tx/{self._currency.name}"
        self._debug("uploading %s (%d bytes)", signed.id, signed.size)
        response = await self._send(
            "POST",
            url,
            content=signed.raw,
            headers={"Content-Type": "application/octet-stream"},
        )
        _raise_for_status(response, url)
        return _parse_model(response, Transaction, url)

    @_cancellable
    async def chunk_upload(
        self,
        data: Payload,
        tags: Optional[Sequence[TagLike]] = None,
        *,
        session_id: Optional[str] = None,
        target: Union[bytes, str, None] = None,
        anchor: Union[bytes, str, None] = None,
    ) -> Transaction:
        """
        Upload a large payload as concurrent chunks.

        Payloads must be between 500 KiB and 95 MiB. Pass the `session_id`
        of a failed attempt to resume it; sessions expire after 30 minutes
        of inactivity.

        Raises:
            SizeOutOfRangeError: Before any I/O, if the size is out of range
            SessionExpiredError: If the session expired
            ChunkUploadFailedError: If a chunk or the finalize call failed
        """
        payload = _read_payload(data)
        check_chunked_size(len(payload))

        signed = await self._sign_in_thread(payload, tags, target=target, anchor=anchor)
        session = await self._open_session(signed.size, session_id)
        await self._send_chunks(session, signed.raw)
        return await self._finalize_session(session)

    def _chunks_url(self, session_id: str, offset: Union[int, str]) -> str:
        return f"{self.node_url}/chunks/{self._currency.name}/{session_id}/{offset}"

    async def _open_session(self, total_size: int, session_id: Optional[str]) -> ChunkSession:
        if session_id is None:
            url = self._chunks_url("-1", "-1")
            response = await self._send("GET", url, headers={"x-total-size": str(total_size)})
        else:
            url = self._chunks_url(session_id, "-1")
            response = await self._send("GET", url)
            if response.status_code in SESSION_GONE_STATUSES:
                raise SessionExpiredError(session_id)
        _raise_for_status(response, url)

        info = _parse_model(response, ChunkSessionInfo, url)
        if info.size is not None and info.size != total_size:
            raise ChunkUploadFailedError(
                0,
                session_id=info.id,
                reason=f"session declared {info.size} bytes, payload is {total_size}",
            )

        chunk_size = self._config.chunk_size or info.max
        chunk_size = max(info.min, min(chunk_size, info.max))
        now = time.time()
        created_at = now if info.created_at is None else info.created_at
        session = ChunkSession(
            id=info.id,
            total_size=total_size,
            chunk_size=chunk_size,
            created_at=created_at,
        )
        for offset, size in info.chunks:
            session.record_chunk(offset, size, now=created_at)
        # The node's clock decides expiry of a resumed session
        session.last_activity = max(created_at, info.last_activity or created_at)
        session.ensure_active(now)

        self._debug(
            "chunk session %s: %d bytes, chunk size %d, %d chunks already received",
            session.id,
            total_size,
            chunk_size,
            len(info.chunks),
        )
        return session

    async def _send_chunks(self, session: ChunkSession, raw: bytes) -> None:
        semaphore = asyncio.Semaphore(self._config.max_concurrency)

        async def send(offset: int, size: int) -> None:
            async with semaphore:
                session.ensure_active()
                url = self._chunks_url(session.id, offset)
                try:
                    response = await self._send(
                        "POST",
                        url,
                        content=raw[offset:offset + size],
                        headers={"Content-Type": "application/octet-stream"},
                    )
                except NetworkError as e:
                    raise ChunkUploadFailedError(
                        offset, session_id=session.id, reason=e.message
                    ) from e

                if response.status_code in SESSION_GONE_STATUSES:
                    raise SessionExpiredError(session.id)
                if not response.is_success:
                    raise ChunkUploadFailedError(
                        offset,
                        session_id=session.id,
                        reason=f"HTTP {response.status_code}",
                    )
                session.record_chunk(offset, size)
                self._debug("chunk %s@%d acknowledged (%d bytes)", session.id, offset, size)

        pending = session.pending_chunks()
        results = await asyncio.gather(
            *(send(offset, size) for offset, size in pending),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        if not failures:
            return
        for failure in failures:
            if not isinstance(failure, IrysError):
                raise failure
        for failure in failures:
            if isinstance(failure, SessionExpiredError):
                raise failure
        raise failures[0]

    async def _finalize_session(self, session: ChunkSession) -> Transaction:
        session.ensure_active()
        session.verify_complete()

        url = self._chunks_url(session.id, "-1")
        try:
            response = await self._send(
                "POST",
                url,
                headers={"Content-Type": "application/octet-stream"},
            )
        except NetworkError as e:
            raise ChunkUploadFailedError(
                session.total_size, session_id=session.id, reason=e.message
            ) from e

        if response.status_code in SESSION_GONE_STATUSES:
            raise SessionExpiredError(session.id)
        if response.status_code == 402:
            raise InsufficientBalanceError(endpoint=url)
        if not response.is_success:
            raise ChunkUploadFailedError(
                session.total_size,
                session_id=session.id,
                reason=f"finalize rejected: HTTP {response.status_code}",
            )

        tx = _parse_model(response, Transaction, url)
        session.complete()
        self._debug("chunk session %s finalized as %s", session.id, tx.id)
        return tx

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    @_cancellable
    async def download(self, tx_id: str) -> File:
        """
        Stream stored data from the gateway.

        The caller owns the returned File and must close it.
        """
        url = f"{self._config.gateway}/{tx_id}"
        request = self._http.build_request("GET", url)
        try:
            response = await self._http.send(request, stream=True)
        except httpx.TransportError as e:
            raise NetworkError(f"GET {url} failed: {e}", endpoint=url) from e

        if not response.is_success:
            await response.aclose()
            raise NetworkError(
                f"Download failed: HTTP {response.status_code}",
                endpoint=url,
                status_code=response.status_code,
            )
        return File(response)

    @_cancellable
    async def get_metadata(self, tx_id: str) -> Transaction:
        """Fetch transaction metadata from the gateway."""
        url = f"{self._config.gateway}/tx/{tx_id}"
        response = await self._send("GET", url)
        _raise_for_status(response, url)
        return _parse_model(response, Transaction, url)

    @_cancellable
    async def get_receipt(self, tx_id: str) -> Receipt:
        """
        Query the node's GraphQL index for a transaction receipt.

        Returns an empty Receipt when nothing is indexed for `tx_id`.
        """
        url = f"{self.node_url}/graphql"
        response = await self._send(
            "POST",
            url,
            json={"query": RECEIPT_QUERY, "variables": {"ids": [tx_id]}},
        )
        _raise_for_status(response, url)

        try:
            body = response.json()
            edges = body["data"]["transactions"]["edges"] or []
            receipt = (edges[0].get("node") or {}).get("receipt") if edges else None
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise BadResponseError(
                "Unexpected GraphQL response", endpoint=url, body=response.text
            ) from e

        if not receipt:
            self._debug("no receipt indexed for %s", tx_id)
            return Receipt()

        try:
            return Receipt.model_validate(receipt)
        except ValidationError as e:
            raise BadResponseError(
                "Malformed receipt", endpoint=url, body=response.text
            ) from e

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Issue a buffered request; transport failures become NetworkError."""
        return await _request(self._http, method, url, **kwargs)

    def _debug(self, msg: str, *args: Any) -> None:
        if self._config.debug:
            self._logger.debug(msg, *args)


async def _request(
    http_client: httpx.AsyncClient,
    method: str,
    url: str,
    **kwargs: Any,
) -> httpx.Response:
    try:
        return await http_client.request(method, url, **kwargs)
    except httpx.TransportError as e:
        raise NetworkError(f"{method} {url} failed: {e}", endpoint=url) from e


async def _fetch_node_info(http_client: httpx.AsyncClient, node_url: str) -> NodeInfo:
    response = await _request(http_client, "GET", node_url)
    _raise_for_status(response, node_url)
    return _parse_model(response, NodeInfo, node_url)


def _raise_for_status(response: httpx.Response, endpoint: str) -> None:
    if response.is_success:
        return
    if response.status_code == 402:
        raise InsufficientBalanceError(endpoint=endpoint)
    raise NetworkError(
        f"HTTP {response.status_code}: {response.text[:200]}",
        endpoint=endpoint,
        status_code=response.status_code,
    )


def _parse_model(response: httpx.Response, model: Type[M], endpoint: str) -> M:
    try:
        return model.model_validate_json(response.content)
    except ValidationError as e:
        raise BadResponseError(
            f"Unexpected {model.__name__} payload",
            endpoint=endpoint,
            body=response.text,
        ) from e
