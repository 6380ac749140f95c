"""
Arweave deep hash.

Hashes a nested structure of byte strings with SHA-384 so that both the
values and their nesting are committed to. Data item signatures are made
over the deep hash of the item fields.
"""

from __future__ import annotations

import hashlib
from typing import Sequence, Union

DeepHashChunk = Union[bytes, Sequence["DeepHashChunk"]]


def _sha384(data: bytes) -> bytes:
    return hashlib.sha384(data).digest()


def deep_hash(chunk: DeepHashChunk) -> bytes:
    """
    Compute the deep hash of a byte string or a (nested) list of byte strings.

    Args:
        chunk: bytes, or a list/tuple of chunks

    Returns:
        48-byte SHA-384 digest
    """
    if isinstance(chunk, (bytes, bytearray, memoryview)):
        data = bytes(chunk)
        tag = b"blob" + str(len(data)).encode()
        return _sha384(_sha384(tag) + _sha384(data))

    items = list(chunk)
    acc = _sha384(b"list" + str(len(items)).encode())
    for item in items:
        acc = _sha384(acc + deep_hash(item))
    return acc
