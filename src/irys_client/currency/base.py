"""
Currency provider interface.

The upload orchestrator only depends on this capability set: a name the
node understands, a signer, a derivable address, and the ability to fund
the node's custodial address on-chain.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from irys_client.currency.signer import Signer


class Currency(ABC):
    """Payment currency bound to a wallet."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Currency identifier used in node URLs (e.g. "matic")."""

    @property
    @abstractmethod
    def signer(self) -> Signer:
        """Signer used for data items."""

    @property
    @abstractmethod
    def address(self) -> str:
        """Wallet address derived from the public key."""

    @property
    def public_key(self) -> bytes:
        return self.signer.public_key

    @abstractmethod
    async def create_funding_tx(self, amount: int, to: str) -> str:
        """
        Build, sign and broadcast a transfer of `amount` base units to `to`.

        Implementations must not retry a broadcast.

        Returns:
            Chain transaction hash

        Raises:
            FundingFailedError: If the transaction cannot be built, sent or mined
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, address={self.address!r})"
