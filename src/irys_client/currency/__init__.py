"""
Currency providers: signer, address and on-chain funding per token.
"""

from irys_client.currency.base import Currency
from irys_client.currency.evm import Arbitrum, BaseEth, Ethereum, EvmCurrency, Matic
from irys_client.currency.signer import (
    SIGNATURE_TYPES,
    EthereumSigner,
    SignatureConfig,
    Signer,
)

__all__ = [
    "Currency",
    "EvmCurrency",
    "Matic",
    "Ethereum",
    "BaseEth",
    "Arbitrum",
    "Signer",
    "EthereumSigner",
    "SignatureConfig",
    "SIGNATURE_TYPES",
]
