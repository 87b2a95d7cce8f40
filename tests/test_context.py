"""Tests for building the shared swap context."""

import dataclasses

import httpx
import pytest

from fakes import CHAIN_ID, PARASWAP_BASE, SIGNER_ADDRESS, SIGNER_KEY
from swaprelay.config import Settings
from swaprelay.context import build_context


def _settings(**overrides) -> Settings:
    values = {"rpc_url": "", "private_key": None, "chain_id": CHAIN_ID, "paraswap_base": PARASWAP_BASE}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestBuildContext:
    def test_without_rpc(self):
        context = build_context(_settings(), httpx.AsyncClient())

        assert context.chain_id == CHAIN_ID
        assert context.signer is None
        assert context.allowances is None
        assert context.paraswap.base_url == PARASWAP_BASE

    def test_key_without_rpc_is_ignored(self):
        context = build_context(_settings(private_key=SIGNER_KEY), httpx.AsyncClient())
        assert context.signer is None

    def test_loads_signer(self):
        settings = _settings(
            rpc_url="http://127.0.0.1:8545",
            private_key=SIGNER_KEY,
            confirmation_timeout=5,
            paraswap_partner="relay",
        )

        context = build_context(settings, httpx.AsyncClient())

        assert context.signer_address == SIGNER_ADDRESS
        assert context.signer.confirmation_timeout == 5
        assert context.allowances is not None
        assert context.paraswap.partner == "relay"

    def test_context_is_frozen(self):
        context = build_context(_settings(), httpx.AsyncClient())
        with pytest.raises(dataclasses.FrozenInstanceError):
            context.chain_id = 1
