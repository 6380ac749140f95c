"""
Shared fixtures for Irys client tests.
"""

from typing import AsyncIterator

import pytest
import pytest_asyncio

from irys_client import IrysClient, IrysConfig
from irys_client.currency import EthereumSigner

from tests.fake_node import (
    GATEWAY_URL,
    NODE_URL,
    TEST_PRIVATE_KEY,
    FakeCurrency,
    FakeNode,
)


# =============================================================================
# Fixtures - Configuration
# =============================================================================


@pytest.fixture
def config() -> IrysConfig:
    """Client configuration pointed at the fake node, with zero backoff."""
    return IrysConfig(
        node=NODE_URL,
        gateway_url=GATEWAY_URL,
        max_retries=3,
        retry_base_delay_ms=0,
        retry_max_delay_ms=0,
    )


@pytest.fixture
def signer() -> EthereumSigner:
    return EthereumSigner(TEST_PRIVATE_KEY)


# =============================================================================
# Fixtures - Fake Node
# =============================================================================


@pytest.fixture
def node() -> FakeNode:
    return FakeNode()


@pytest.fixture
def currency(node: FakeNode) -> FakeCurrency:
    return FakeCurrency(node)


@pytest_asyncio.fixture
async def client(
    node: FakeNode,
    currency: FakeCurrency,
    config: IrysConfig,
) -> AsyncIterator[IrysClient]:
    """IrysClient talking to the in-memory node."""
    client = await IrysClient.create(currency, config, transport=node.transport())
    yield client
    await client.close()
