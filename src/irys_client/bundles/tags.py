"""
Avro encoding of data item tags.

Tags are serialized as an Avro array of `{name: bytes, value: bytes}`
records. Longs use zig-zag varints. An empty tag list encodes to zero bytes.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple, Union

from irys_client.errors import SigningFailedError
from irys_client.types import Tag

MAX_TAGS = 128
MAX_TAG_NAME_BYTES = 1024
MAX_TAG_VALUE_BYTES = 3072


def _encode_long(n: int) -> bytes:
    zigzag = (n << 1) ^ (n >> 63)
    out = bytearray()
    while zigzag & ~0x7F:
        out.append((zigzag & 0x7F) | 0x80)
        zigzag >>= 7
    out.append(zigzag)
    return bytes(out)


def _decode_long(raw: bytes, pos: int) -> Tuple[int, int]:
    shift = 0
    result = 0
    while True:
        if pos >= len(raw):
            raise ValueError("truncated varint in tag data")
        byte = raw[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            break
        shift += 7
    return (result >> 1) ^ -(result & 1), pos


def _encode_bytes(data: bytes) -> bytes:
    return _encode_long(len(data)) + data


def _decode_text(data: bytes) -> Union[str, bytes]:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data


def validate_tags(tags: Sequence[Tag]) -> None:
    """
    Check tag count and sizes.

    Raises:
        SigningFailedError: If any limit is violated
    """
    if len(tags) > MAX_TAGS:
        raise SigningFailedError(f"too many tags ({len(tags)} > {MAX_TAGS})")
    for i, tag in enumerate(tags):
        name = tag.name_bytes
        value = tag.value_bytes
        if not name or len(name) > MAX_TAG_NAME_BYTES:
            raise SigningFailedError(
                f"tag {i} name must be 1..{MAX_TAG_NAME_BYTES} bytes",
                details={"tag_index": i},
            )
        if not value or len(value) > MAX_TAG_VALUE_BYTES:
            raise SigningFailedError(
                f"tag {i} value must be 1..{MAX_TAG_VALUE_BYTES} bytes",
                details={"tag_index": i},
            )


def encode_tags(tags: Sequence[Tag]) -> bytes:
    """
    Serialize tags in order.

    Args:
        tags: Tags to encode

    Returns:
        Avro bytes (empty for no tags)
    """
    validate_tags(tags)
    if not tags:
        return b""

    out = bytearray(_encode_long(len(tags)))
    for tag in tags:
        out += _encode_bytes(tag.name_bytes)
        out += _encode_bytes(tag.value_bytes)
    out += _encode_long(0)
    return bytes(out)


def decode_tags(raw: bytes) -> List[Tag]:
    """
    Parse Avro tag bytes.

    Raises:
        ValueError: If the data is truncated or malformed
    """
    tags: List[Tag] = []
    if not raw:
        return tags

    pos = 0
    while True:
        count, pos = _decode_long(raw, pos)
        if count == 0:
            break
        if count < 0:
            # Negative block count is followed by the block size in bytes
            count = -count
            _, pos = _decode_long(raw, pos)
        for _ in range(count):
            fields = []
            for _field in ("name", "value"):
                length, pos = _decode_long(raw, pos)
                if length < 0 or pos + length > len(raw):
                    raise ValueError("truncated tag data")
                fields.append(_decode_text(raw[pos:pos + length]))
                pos += length
            tags.append(Tag(name=fields[0], value=fields[1]))
    return tags
