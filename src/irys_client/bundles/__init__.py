"""
Bundles Module - ANS-104 data item codec and signing.

Example:
    ```python
    from irys_client.bundles import sign_payload

    tx = sign_payload(
        b"hello",
        currency.signer,
        [("Content-Type", "text/plain")],
    )
    print(tx.id, len(tx.raw))
    ```
"""

from irys_client.bundles.data_item import (
    ANCHOR_LENGTH,
    TARGET_LENGTH,
    DataItem,
    SignedTransaction,
    b64url_decode,
    b64url_encode,
    create_data_item,
    parse_data_item,
    sign_data_item,
    sign_payload,
    transaction_id,
)
from irys_client.bundles.deep_hash import deep_hash
from irys_client.bundles.tags import (
    MAX_TAG_NAME_BYTES,
    MAX_TAG_VALUE_BYTES,
    MAX_TAGS,
    decode_tags,
    encode_tags,
)

__all__ = [
    "DataItem",
    "SignedTransaction",
    "create_data_item",
    "sign_data_item",
    "sign_payload",
    "parse_data_item",
    "transaction_id",
    "deep_hash",
    "encode_tags",
    "decode_tags",
    "b64url_encode",
    "b64url_decode",
    "MAX_TAGS",
    "MAX_TAG_NAME_BYTES",
    "MAX_TAG_VALUE_BYTES",
    "TARGET_LENGTH",
    "ANCHOR_LENGTH",
]
