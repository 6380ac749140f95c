"""
ANS-104 Data Items

Canonical binary layout of a bundled transaction:

    signature type      2 bytes, little endian
    signature           fixed length per signature type
    owner               fixed length per signature type
    target              1 presence byte (+ 32 bytes)
    anchor              1 presence byte (+ 32 bytes)
    number of tags      8 bytes, little endian
    tag bytes length    8 bytes, little endian
    tags                Avro encoded
    data                remaining bytes

The signature covers the deep hash of
`["dataitem", "1", type, owner, target, anchor, tags, data]` and the
transaction id is base64url(sha256(signature)).
"""

from __future__ import annotations

import base64
import hashlib
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union

from irys_client.bundles.deep_hash import deep_hash
from irys_client.bundles.tags import decode_tags, encode_tags, validate_tags
from irys_client.currency.signer import SIGNATURE_TYPES, Signer
from irys_client.errors import SigningFailedError
from irys_client.types import Tag, TagLike, normalize_tags

TARGET_LENGTH = 32
ANCHOR_LENGTH = 32

BytesLike = Union[bytes, bytearray, memoryview]


def b64url_encode(data: bytes) -> str:
    """Unpadded base64url, as used for Arweave ids and addresses."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(value: str) -> bytes:
    """Decode unpadded base64url."""
    padding = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(value + padding)


def _signature_length(signature_type: int) -> int:
    config = SIGNATURE_TYPES.get(signature_type)
    if config is None:
        raise SigningFailedError(f"unsupported signature type {signature_type}")
    return config.signature_length


def _fixed_field(value: Union[BytesLike, str, None], length: int, name: str) -> bytes:
    if value is None:
        return b""
    if isinstance(value, str):
        try:
            value = b64url_decode(value)
        except ValueError as e:
            raise SigningFailedError(f"{name} is not valid base64url") from e
    value = bytes(value)
    if value and len(value) != length:
        raise SigningFailedError(
            f"{name} must be {length} bytes, got {len(value)}",
            details={"field": name},
        )
    return value


@dataclass(frozen=True)
class DataItem:
    """
    Unsigned data item. Immutable once constructed.

    Use `create_data_item()` to build a validated instance.
    """

    signature_type: int
    owner: bytes
    data: bytes
    tags: Tuple[Tag, ...] = ()
    target: bytes = b""
    anchor: bytes = b""

    @property
    def raw_tags(self) -> bytes:
        return encode_tags(self.tags)

    def signature_data(self) -> bytes:
        """Deep hash of the fields covered by the signature."""
        return deep_hash([
            b"dataitem",
            b"1",
            str(self.signature_type).encode(),
            self.owner,
            self.target,
            self.anchor,
            self.raw_tags,
            self.data,
        ])

    def encode(self, signature: Optional[bytes] = None) -> bytes:
        """
        Serialize to the canonical layout.

        Args:
            signature: Signature bytes; the slot is zero-filled when omitted

        Returns:
            Encoded item bytes (deterministic for identical inputs)
        """
        sig_len = _signature_length(self.signature_type)
        if signature is None:
            signature = bytes(sig_len)
        if len(signature) != sig_len:
            raise SigningFailedError(
                f"signature must be {sig_len} bytes, got {len(signature)}"
            )

        raw_tags = self.raw_tags
        out = bytearray()
        out += self.signature_type.to_bytes(2, "little")
        out += signature
        out += self.owner
        out += (b"\x01" + self.target) if self.target else b"\x00"
        out += (b"\x01" + self.anchor) if self.anchor else b"\x00"
        out += len(self.tags).to_bytes(8, "little")
        out += len(raw_tags).to_bytes(8, "little")
        out += raw_tags
        out += self.data
        return bytes(out)


@dataclass(frozen=True)
class SignedTransaction:
    """Signed data item. `raw` is the exact body sent to the node."""

    item: DataItem
    signature: bytes
    id: str
    raw: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.raw)

    @property
    def owner_b64(self) -> str:
        return b64url_encode(self.item.owner)

    def verify(self) -> bool:
        """Check the signature over the item fields and the derived id."""
        config = SIGNATURE_TYPES.get(self.item.signature_type)
        if config is None:
            return False
        if self.id != transaction_id(self.signature):
            return False
        return config.verify(self.item.owner, self.item.signature_data(), self.signature)


def transaction_id(signature: bytes) -> str:
    """Transaction id derived from the signature bytes."""
    return b64url_encode(hashlib.sha256(signature).digest())


def create_data_item(
    data: BytesLike,
    signer: Signer,
    tags: Optional[Sequence[TagLike]] = None,
    *,
    target: Union[BytesLike, str, None] = None,
    anchor: Union[BytesLike, str, None] = None,
) -> DataItem:
    """
    Build a validated, unsigned data item for `signer`.

    Args:
        data: Payload bytes
        signer: Signer whose public key becomes the owner
        tags: Ordered tags as Tag models or (name, value) tuples
        target: Optional 32-byte target (bytes or base64url)
        anchor: Optional 32-byte anchor (bytes or base64url)

    Raises:
        SigningFailedError: If any field is invalid
    """
    normalized = normalize_tags(tags)
    validate_tags(normalized)

    owner = bytes(signer.public_key)
    if len(owner) != signer.owner_length:
        raise SigningFailedError(
            f"owner must be {signer.owner_length} bytes, got {len(owner)}"
        )

    return DataItem(
        signature_type=signer.signature_type,
        owner=owner,
        data=bytes(data),
        tags=tuple(normalized),
        target=_fixed_field(target, TARGET_LENGTH, "target"),
        anchor=_fixed_field(anchor, ANCHOR_LENGTH, "anchor"),
    )


def sign_data_item(item: DataItem, signer: Signer) -> SignedTransaction:
    """
    Sign a data item.

    Raises:
        SigningFailedError: If the signer does not match the item, the
            payload exceeds the signer's limit, or signing fails
    """
    if item.signature_type != signer.signature_type:
        raise SigningFailedError(
            f"signer type {signer.signature_type} does not match item type "
            f"{item.signature_type}"
        )
    if bytes(signer.public_key) != item.owner:
        raise SigningFailedError("signer public key does not match item owner")
    if signer.max_data_size is not None and len(item.data) > signer.max_data_size:
        raise SigningFailedError(
            f"payload of {len(item.data)} bytes exceeds signer limit "
            f"{signer.max_data_size}",
            details={"size_bytes": len(item.data)},
        )

    try:
        signature = bytes(signer.sign(item.signature_data()))
    except Exception as e:
        raise SigningFailedError(str(e)) from e

    if len(signature) != signer.signature_length:
        raise SigningFailedError(
            f"signer returned {len(signature)} bytes, expected "
            f"{signer.signature_length}"
        )

    return SignedTransaction(
        item=item,
        signature=signature,
        id=transaction_id(signature),
        raw=item.encode(signature),
    )


def sign_payload(
    data: BytesLike,
    signer: Signer,
    tags: Optional[Sequence[TagLike]] = None,
    *,
    target: Union[BytesLike, str, None] = None,
    anchor: Union[BytesLike, str, None] = None,
) -> SignedTransaction:
    """Shortcut for `sign_data_item(create_data_item(...), signer)`."""
    item = create_data_item(data, signer, tags, target=target, anchor=anchor)
    return sign_data_item(item, signer)


def _read_fixed(raw: bytes, pos: int, length: int, name: str) -> Tuple[bytes, int]:
    end = pos + length
    if end > len(raw):
        raise ValueError(f"data item truncated in {name}")
    return raw[pos:end], end


def _read_optional(raw: bytes, pos: int, length: int, name: str) -> Tuple[bytes, int]:
    flag, pos = _read_fixed(raw, pos, 1, f"{name} flag")
    if flag == b"\x00":
        return b"", pos
    if flag != b"\x01":
        raise ValueError(f"invalid {name} presence byte")
    return _read_fixed(raw, pos, length, name)


def parse_data_item(raw: bytes) -> SignedTransaction:
    """
    Decode a signed data item from its binary layout.

    Raises:
        ValueError: If the bytes are not a well-formed data item
    """
    type_bytes, pos = _read_fixed(raw, 0, 2, "signature type")
    signature_type = int.from_bytes(type_bytes, "little")
    config = SIGNATURE_TYPES.get(signature_type)
    if config is None:
        raise ValueError(f"unsupported signature type {signature_type}")

    signature, pos = _read_fixed(raw, pos, config.signature_length, "signature")
    owner, pos = _read_fixed(raw, pos, config.owner_length, "owner")
    target, pos = _read_optional(raw, pos, TARGET_LENGTH, "target")
    anchor, pos = _read_optional(raw, pos, ANCHOR_LENGTH, "anchor")

    count_bytes, pos = _read_fixed(raw, pos, 8, "tag count")
    length_bytes, pos = _read_fixed(raw, pos, 8, "tag length")
    tag_count = int.from_bytes(count_bytes, "little")
    raw_tags, pos = _read_fixed(raw, pos, int.from_bytes(length_bytes, "little"), "tags")
    tags = decode_tags(raw_tags)
    if len(tags) != tag_count:
        raise ValueError(f"tag count mismatch: header {tag_count}, decoded {len(tags)}")

    item = DataItem(
        signature_type=signature_type,
        owner=owner,
        data=raw[pos:],
        tags=tuple(tags),
        target=target,
        anchor=anchor,
    )
    return SignedTransaction(
        item=item,
        signature=signature,
        id=transaction_id(signature),
        raw=bytes(raw),
    )
