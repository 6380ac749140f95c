"""
Tests for EVM currencies.

Tests cover:
- Chain presets
- Funding transaction build, sign and broadcast
- Reverted, failed and unconfirmed funding transactions
"""

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from irys_client.currency import Arbitrum, BaseEth, Ethereum, EvmCurrency, Matic
from irys_client.errors import FundingFailedError

from tests.fake_node import FUNDING_ADDRESS, TEST_PRIVATE_KEY

TX_HASH = bytes.fromhex("ab" * 32)


async def resolved(value: Any) -> Any:
    return value


def create_mock_w3(status: int = 1) -> MagicMock:
    """Create a mock AsyncWeb3 whose eth namespace answers a single transfer."""
    w3 = MagicMock()
    w3.eth.get_transaction_count = AsyncMock(return_value=7)
    w3.eth.gas_price = resolved(30 * 10**9)
    w3.eth.estimate_gas = AsyncMock(return_value=21000)
    w3.eth.send_raw_transaction = AsyncMock(return_value=TX_HASH)
    w3.eth.wait_for_transaction_receipt = AsyncMock(return_value={"status": status})
    return w3


# =============================================================================
# Preset Tests
# =============================================================================


class TestPresets:
    """Tests for chain presets."""

    @pytest.mark.parametrize(
        "cls,name",
        [
            (Matic, "matic"),
            (Ethereum, "ethereum"),
            (BaseEth, "base-eth"),
            (Arbitrum, "arbitrum"),
        ],
    )
    def test_names(self, cls: type, name: str) -> None:
        currency = cls(TEST_PRIVATE_KEY, w3=MagicMock())
        assert currency.name == name
        assert currency.rpc_url == cls.DEFAULT_RPC

    def test_address_and_public_key(self) -> None:
        currency = Matic(TEST_PRIVATE_KEY, w3=MagicMock())
        assert currency.address == currency.signer.address
        assert currency.public_key == currency.signer.public_key
        assert "matic" in repr(currency)


# =============================================================================
# Funding Tests
# =============================================================================


class TestCreateFundingTx:
    """Tests for create_funding_tx."""

    @pytest.mark.asyncio
    async def test_sends_transfer(self) -> None:
        w3 = create_mock_w3()
        currency = Matic(TEST_PRIVATE_KEY, w3=w3)

        tx_hash = await currency.create_funding_tx(50, FUNDING_ADDRESS)

        assert tx_hash == "0x" + "ab" * 32
        w3.eth.send_raw_transaction.assert_awaited_once()
        raw = w3.eth.send_raw_transaction.await_args.args[0]
        assert isinstance(raw, (bytes, bytearray))

        built = w3.eth.estimate_gas.await_args.args[0]
        assert built["value"] == 50
        assert built["nonce"] == 7
        assert built["chainId"] == 137
        assert built["to"].lower() == FUNDING_ADDRESS.lower()

    @pytest.mark.asyncio
    async def test_gas_buffer(self) -> None:
        w3 = create_mock_w3()
        currency = Matic(TEST_PRIVATE_KEY, w3=w3)
        tx = await currency._build_transfer(50, FUNDING_ADDRESS)
        assert 21000 < tx["gas"] <= 25200

    @pytest.mark.asyncio
    async def test_chain_id_from_rpc(self) -> None:
        w3 = create_mock_w3()
        w3.eth.chain_id = resolved(80002)
        currency = EvmCurrency("matic", TEST_PRIVATE_KEY, "http://rpc.test", w3=w3)

        tx = await currency._build_transfer(1, FUNDING_ADDRESS)

        assert tx["chainId"] == 80002

    @pytest.mark.asyncio
    async def test_reverted(self) -> None:
        currency = Matic(TEST_PRIVATE_KEY, w3=create_mock_w3(status=0))

        with pytest.raises(FundingFailedError) as exc_info:
            await currency.create_funding_tx(50, FUNDING_ADDRESS)

        assert exc_info.value.reason == "transaction reverted"
        assert exc_info.value.details["tx_hash"] == "0x" + "ab" * 32

    @pytest.mark.asyncio
    async def test_broadcast_error(self) -> None:
        w3 = create_mock_w3()
        w3.eth.send_raw_transaction = AsyncMock(side_effect=ValueError("nonce too low"))
        currency = Matic(TEST_PRIVATE_KEY, w3=w3)

        with pytest.raises(FundingFailedError) as exc_info:
            await currency.create_funding_tx(50, FUNDING_ADDRESS)

        assert exc_info.value.reason == "nonce too low"
        assert exc_info.value.currency == "matic"

    @pytest.mark.asyncio
    async def test_receipt_timeout(self) -> None:
        async def never_mined(*args: Any, **kwargs: Any) -> None:
            await asyncio.sleep(5)

        w3 = create_mock_w3()
        w3.eth.wait_for_transaction_receipt = never_mined
        currency = Matic(TEST_PRIVATE_KEY, w3=w3, tx_wait_timeout=0.01)

        with pytest.raises(FundingFailedError, match="receipt not available"):
            await currency.create_funding_tx(50, FUNDING_ADDRESS)

    @pytest.mark.asyncio
    async def test_non_positive_amount(self) -> None:
        w3 = create_mock_w3()
        currency = Matic(TEST_PRIVATE_KEY, w3=w3)
        with pytest.raises(FundingFailedError):
            await currency.create_funding_tx(0, FUNDING_ADDRESS)
        w3.eth.send_raw_transaction.assert_not_awaited()
        w3.eth.gas_price.close()
