"""
Irys Client Types

Configuration and wire models shared by the client modules:
- IrysConfig: immutable client configuration
- Tag: data item metadata tag
- NodeInfo, Transaction, Receipt: node and gateway responses
- File: streamed download result
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, List, Literal, Optional, Sequence, Tuple, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Networks
# ============================================================================

IrysNetwork = Literal["mainnet", "devnet"]
"""Irys network type."""

IRYS_NODES: Dict[str, str] = {
    "mainnet": "https://node1.irys.xyz",
    "mainnet2": "https://node2.irys.xyz",
    "devnet": "https://devnet.irys.xyz",
}

DEFAULT_GATEWAY = "https://gateway.irys.xyz"


# ============================================================================
# Client Configuration
# ============================================================================

class IrysConfig(BaseModel):
    """
    Immutable configuration snapshot for `IrysClient`.

    Example:
        ```python
        config = IrysConfig(node="devnet", debug=True, chunk_size=1_048_576)
        ```
    """

    model_config = ConfigDict(frozen=True)

    node: str = Field(
        default="mainnet",
        description="Node name (mainnet, mainnet2, devnet) or a full node URL",
    )
    gateway_url: str = Field(
        default=DEFAULT_GATEWAY,
        description="Gateway used for downloads and metadata",
    )
    debug: bool = Field(
        default=False,
        description="Enable verbose diagnostic logging",
    )
    timeout: int = Field(
        default=300000,
        ge=1000,
        description="Per-request HTTP timeout in milliseconds",
    )
    max_concurrency: int = Field(
        default=5,
        ge=1,
        le=64,
        description="Maximum chunks in flight during a chunked upload",
    )
    chunk_size: Optional[int] = Field(
        default=None,
        ge=1,
        description="Chunk size in bytes; defaults to the size advertised by the node",
    )
    max_retries: int = Field(
        default=5,
        ge=1,
        description="Maximum HTTP attempts per request",
    )
    retry_base_delay_ms: int = Field(
        default=1000,
        ge=0,
        description="First backoff delay in milliseconds",
    )
    retry_max_delay_ms: int = Field(
        default=30000,
        ge=0,
        description="Backoff delay cap in milliseconds",
    )

    @property
    def node_url(self) -> str:
        """Resolved node base URL without trailing slash."""
        return IRYS_NODES.get(self.node, self.node).rstrip("/")

    @property
    def gateway(self) -> str:
        """Gateway base URL without trailing slash."""
        return self.gateway_url.rstrip("/")

    @classmethod
    def from_env(cls, **overrides: object) -> "IrysConfig":
        """
        Build a configuration from IRYS_* environment variables.

        Recognized: IRYS_NODE, IRYS_GATEWAY, IRYS_DEBUG, IRYS_TIMEOUT_MS,
        IRYS_CHUNK_SIZE, IRYS_MAX_CONCURRENCY. Keyword overrides win.
        """
        values: Dict[str, object] = {}
        env = os.environ
        if env.get("IRYS_NODE"):
            values["node"] = env["IRYS_NODE"]
        if env.get("IRYS_GATEWAY"):
            values["gateway_url"] = env["IRYS_GATEWAY"]
        if env.get("IRYS_DEBUG"):
            values["debug"] = env["IRYS_DEBUG"].lower() in ("1", "true", "yes", "on")
        if env.get("IRYS_TIMEOUT_MS"):
            values["timeout"] = int(env["IRYS_TIMEOUT_MS"])
        if env.get("IRYS_CHUNK_SIZE"):
            values["chunk_size"] = int(env["IRYS_CHUNK_SIZE"])
        if env.get("IRYS_MAX_CONCURRENCY"):
            values["max_concurrency"] = int(env["IRYS_MAX_CONCURRENCY"])
        values.update(overrides)
        return cls(**values)


# ============================================================================
# Tags
# ============================================================================

class Tag(BaseModel):
    """
    Data item tag. Order of tags is part of the signed encoding.

    Names and values are byte strings on the wire. `str` values are
    encoded as UTF-8; decoded tags that are not valid UTF-8 stay `bytes`.
    """

    model_config = ConfigDict(frozen=True)

    name: Union[str, bytes]
    value: Union[str, bytes]

    @property
    def name_bytes(self) -> bytes:
        return _to_bytes(self.name)

    @property
    def value_bytes(self) -> bytes:
        return _to_bytes(self.value)


def _to_bytes(text: Union[str, bytes]) -> bytes:
    return text.encode("utf-8") if isinstance(text, str) else text


TagLike = Union[Tag, Tuple[Union[str, bytes], Union[str, bytes]]]


def normalize_tags(tags: Optional[Sequence[TagLike]]) -> List[Tag]:
    """Convert `(name, value)` tuples to Tag models, preserving order."""
    if not tags:
        return []
    return [
        tag if isinstance(tag, Tag) else Tag(name=tag[0], value=tag[1])
        for tag in tags
    ]


# ============================================================================
# Node Responses
# ============================================================================

class NodeInfo(BaseModel):
    """Node root endpoint response."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    version: Optional[str] = None
    addresses: Dict[str, str] = Field(
        default_factory=dict,
        description="Custodial funding address per currency",
    )
    gateway: Optional[str] = None


class BalanceResponse(BaseModel):
    """Balance endpoint response. Balance arrives as a decimal string."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    balance: int = Field(..., ge=0)


class Transaction(BaseModel):
    """
    Transaction metadata as returned by the node (upload) or gateway (lookup).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    timestamp: Optional[int] = None
    version: Optional[str] = None
    public: Optional[str] = None
    signature: Optional[str] = None
    deadline_height: Optional[int] = Field(default=None, alias="deadlineHeight")
    owner: Optional[str] = None
    address: Optional[str] = None
    currency: Optional[str] = None
    target: Optional[str] = None
    anchor: Optional[str] = None
    tags: List[Tag] = Field(default_factory=list)
    data_size: Optional[int] = Field(default=None, alias="dataSize")


class Receipt(BaseModel):
    """
    Proof-of-storage receipt.

    An empty receipt (all defaults) is returned when the network has not
    indexed one for the transaction.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    signature: str = ""
    timestamp: int = 0
    version: str = ""
    deadline_height: int = Field(default=0, alias="deadlineHeight")

    @property
    def is_empty(self) -> bool:
        return not self.signature and not self.timestamp


class ChunkSessionInfo(BaseModel):
    """Chunk session descriptor returned by the node."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    min: int = Field(default=1, ge=1, description="Smallest chunk the node accepts")
    max: int = Field(default=25_000_000, ge=1, description="Largest chunk the node accepts")
    size: Optional[int] = Field(default=None, description="Declared total size")
    chunks: List[Tuple[int, int]] = Field(
        default_factory=list,
        description="Chunks already received as (offset, size) pairs",
    )
    created_at: Optional[float] = Field(
        default=None,
        alias="createdAt",
        description="Session creation time, Unix seconds",
    )
    last_activity: Optional[float] = Field(
        default=None,
        alias="lastActivity",
        description="Time of the last accepted chunk, Unix seconds",
    )


# ============================================================================
# Download Result
# ============================================================================

@dataclass
class File:
    """
    Streamed download. The caller owns the stream and must close it.

    Example:
        ```python
        async with await client.download(tx_id) as file:
            async for chunk in file.iter_bytes():
                sink.write(chunk)
        ```
    """

    response: httpx.Response
    headers: httpx.Headers = field(init=False)
    content_length: Optional[int] = field(init=False)
    content_type: Optional[str] = field(init=False)

    def __post_init__(self) -> None:
        self.headers = self.response.headers
        length = self.response.headers.get("Content-Length")
        self.content_length = int(length) if length and length.isdigit() else None
        self.content_type = self.response.headers.get("Content-Type")

    def iter_bytes(self, chunk_size: Optional[int] = None) -> AsyncIterator[bytes]:
        return self.response.aiter_bytes(chunk_size)

    async def read(self) -> bytes:
        """Read the remaining stream into memory."""
        return await self.response.aread()

    async def aclose(self) -> None:
        await self.response.aclose()

    async def __aenter__(self) -> "File":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
