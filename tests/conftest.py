"""Pytest configuration and fixtures."""

import os

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["RPC_URL"] = ""
os.environ["PRIVATE_KEY"] = ""
os.environ["DEBUG"] = "true"

from fakes import CHAIN_ID, PARASWAP_BASE, FakeParaSwap, make_signer
from swaprelay.config import Settings
from swaprelay.context import SwapContext
from swaprelay.swap.signer import EVMSigner


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        rpc_url="",
        private_key=None,
        chain_id=CHAIN_ID,
        paraswap_base=PARASWAP_BASE,
    )


@pytest.fixture
def paraswap() -> FakeParaSwap:
    return FakeParaSwap()


@pytest.fixture
def signer() -> EVMSigner:
    return make_signer()


@pytest.fixture
def unsigned_context(paraswap) -> SwapContext:
    """Context with no chain connection and no signing key."""
    return SwapContext(chain_id=CHAIN_ID, paraswap=paraswap.client())


@pytest.fixture
def signed_context(paraswap, signer) -> SwapContext:
    return SwapContext(
        chain_id=CHAIN_ID,
        paraswap=paraswap.client(),
        signer=signer,
    )
