"""
Signature primitives for data items.

Each signer declares its ANS-104 signature type and the fixed lengths of
its signature and owner (public key) fields. The data item codec is
agnostic of the algorithm and only calls `sign()`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Dict, NamedTuple, Optional

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from eth_keys import keys


class Signer(ABC):
    """Signature algorithm bound to a private key."""

    signature_type: int
    signature_length: int
    owner_length: int

    max_data_size: Optional[int] = None
    """Largest payload this signer accepts, None for unlimited."""

    @property
    @abstractmethod
    def public_key(self) -> bytes:
        """Raw public key as stored in the data item owner field."""

    @abstractmethod
    def sign(self, message: bytes) -> bytes:
        """Sign a message, returning exactly `signature_length` bytes."""


class EthereumSigner(Signer):
    """
    secp256k1 signer producing EIP-191 personal-sign signatures.

    Owner is the 65-byte uncompressed public key (0x04 prefix).

    Example:
        ```python
        signer = EthereumSigner(os.environ["IRYS_PRIVATE_KEY"])
        signature = signer.sign(message)
        ```
    """

    signature_type = 3
    signature_length = 65
    owner_length = 65

    def __init__(self, private_key: str) -> None:
        self._account = Account.from_key(private_key)
        key = keys.PrivateKey(bytes(self._account.key))
        self._public_key = b"\x04" + key.public_key.to_bytes()

    @property
    def public_key(self) -> bytes:
        return self._public_key

    @property
    def account(self) -> LocalAccount:
        return self._account

    @property
    def address(self) -> str:
        """Checksummed address of the signing key."""
        return self._account.address

    def sign(self, message: bytes) -> bytes:
        signed = self._account.sign_message(encode_defunct(primitive=message))
        return bytes(signed.signature)

    @staticmethod
    def verify(public_key: bytes, message: bytes, signature: bytes) -> bool:
        """Check an Ethereum signature against an uncompressed public key."""
        try:
            expected = keys.PublicKey(public_key[1:]).to_checksum_address()
            recovered = Account.recover_message(
                encode_defunct(primitive=message),
                signature=signature,
            )
        except Exception:
            return False
        return recovered == expected


class SignatureConfig(NamedTuple):
    """Field lengths and verifier for one signature type."""

    signature_length: int
    owner_length: int
    verify: Callable[[bytes, bytes, bytes], bool]


SIGNATURE_TYPES: Dict[int, SignatureConfig] = {
    EthereumSigner.signature_type: SignatureConfig(
        signature_length=EthereumSigner.signature_length,
        owner_length=EthereumSigner.owner_length,
        verify=EthereumSigner.verify,
    ),
}
"""Signature types this client can parse and verify."""
