"""
EVM currencies (Polygon, Ethereum, Base, Arbitrum).

Funding is a native-token transfer to the node's custodial address, signed
locally with eth_account and broadcast through an AsyncWeb3 provider.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from web3 import AsyncWeb3, Web3

from irys_client.currency.base import Currency
from irys_client.currency.signer import EthereumSigner
from irys_client.errors import FundingFailedError
from irys_client.utils.logging import get_logger

_logger = get_logger(__name__)

# Default timeout for funding receipts (5 minutes)
DEFAULT_TX_WAIT_TIMEOUT = 300.0

GAS_ESTIMATION_BUFFER = 1.2


class EvmCurrency(Currency):
    """
    Native token on an EVM chain.

    Example:
        ```python
        currency = EvmCurrency(
            "base-eth",
            private_key=os.environ["IRYS_PRIVATE_KEY"],
            rpc_url="https://mainnet.base.org",
        )
        ```
    """

    def __init__(
        self,
        name: str,
        private_key: str,
        rpc_url: str,
        *,
        chain_id: Optional[int] = None,
        w3: Optional[AsyncWeb3] = None,
        tx_wait_timeout: float = DEFAULT_TX_WAIT_TIMEOUT,
    ) -> None:
        self._name = name
        self._signer = EthereumSigner(private_key)
        self._account = self._signer.account
        self._rpc_url = rpc_url
        self._chain_id = chain_id
        self._w3 = w3 or AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        self._tx_wait_timeout = tx_wait_timeout

    @property
    def name(self) -> str:
        return self._name

    @property
    def signer(self) -> EthereumSigner:
        return self._signer

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    async def _build_transfer(self, amount: int, to: str) -> Dict[str, Any]:
        w3 = self._w3
        chain_id = self._chain_id or await w3.eth.chain_id
        tx: Dict[str, Any] = {
            "from": self.address,
            "to": Web3.to_checksum_address(to),
            "value": amount,
            "nonce": await w3.eth.get_transaction_count(self.address),
            "gasPrice": await w3.eth.gas_price,
            "chainId": chain_id,
        }
        gas = await w3.eth.estimate_gas(tx)
        tx["gas"] = int(gas * GAS_ESTIMATION_BUFFER)
        return tx

    async def create_funding_tx(self, amount: int, to: str) -> str:
        if amount <= 0:
            raise FundingFailedError(
                "amount must be positive", amount=amount, currency=self.name
            )

        try:
            tx = await self._build_transfer(amount, to)
            signed = self._account.sign_transaction(tx)
            raw_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        except FundingFailedError:
            raise
        except Exception as e:
            raise FundingFailedError(str(e), amount=amount, currency=self.name) from e

        tx_hash = Web3.to_hex(raw_hash)
        _logger.info(
            "Funding transaction broadcast",
            extra={"currency": self.name, "tx_hash": tx_hash, "amount": amount},
        )

        try:
            receipt = await asyncio.wait_for(
                self._w3.eth.wait_for_transaction_receipt(raw_hash),
                timeout=self._tx_wait_timeout,
            )
        except asyncio.TimeoutError as e:
            raise FundingFailedError(
                f"receipt not available after {self._tx_wait_timeout}s",
                amount=amount,
                currency=self.name,
                details={"tx_hash": tx_hash},
            ) from e

        if receipt["status"] != 1:
            raise FundingFailedError(
                "transaction reverted",
                amount=amount,
                currency=self.name,
                details={"tx_hash": tx_hash},
            )

        return tx_hash


class Matic(EvmCurrency):
    """MATIC/POL on Polygon PoS."""

    DEFAULT_RPC = "https://polygon-rpc.com"

    def __init__(self, private_key: str, rpc_url: str = DEFAULT_RPC, **kwargs: Any) -> None:
        super().__init__("matic", private_key, rpc_url, chain_id=137, **kwargs)


class Ethereum(EvmCurrency):
    """ETH on Ethereum mainnet."""

    DEFAULT_RPC = "https://ethereum-rpc.publicnode.com"

    def __init__(self, private_key: str, rpc_url: str = DEFAULT_RPC, **kwargs: Any) -> None:
        super().__init__("ethereum", private_key, rpc_url, chain_id=1, **kwargs)


class BaseEth(EvmCurrency):
    """ETH on Base."""

    DEFAULT_RPC = "https://mainnet.base.org"

    def __init__(self, private_key: str, rpc_url: str = DEFAULT_RPC, **kwargs: Any) -> None:
        super().__init__("base-eth", private_key, rpc_url, chain_id=8453, **kwargs)


class Arbitrum(EvmCurrency):
    """ETH on Arbitrum One."""

    DEFAULT_RPC = "https://arb1.arbitrum.io/rpc"

    def __init__(self, private_key: str, rpc_url: str = DEFAULT_RPC, **kwargs: Any) -> None:
        super().__init__("arbitrum", private_key, rpc_url, chain_id=42161, **kwargs)
