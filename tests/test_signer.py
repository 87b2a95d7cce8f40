"""Tests for the EVM signer."""

import threading

import pytest
from web3.exceptions import TransactionNotFound

from fakes import AUGUSTUS, CHAIN_ID, OTHER_WALLET, SIGNER_ADDRESS, SIGNER_KEY, checksum, make_web3
from swaprelay.swap.signer import ConfirmationTimeout, EVMSigner


class TestEVMSigner:
    """Tests for signing and broadcasting."""

    def test_address_from_key(self):
        signer = EVMSigner.from_private_key(make_web3(), SIGNER_KEY)
        assert signer.address == SIGNER_ADDRESS

    def test_matches_is_case_insensitive(self, signer):
        assert signer.matches(SIGNER_ADDRESS.lower())
        assert signer.matches(SIGNER_ADDRESS.upper().replace("0X", "0x"))
        assert not signer.matches(OTHER_WALLET)

    @pytest.mark.asyncio
    async def test_fills_missing_params(self, signer):
        tx_hash = await signer.sign_and_send_transaction(
            {"to": checksum(AUGUSTUS), "data": "0x1234", "value": 0}
        )

        eth = signer.web3.eth
        assert tx_hash == "0x" + "11" * 32
        eth.get_transaction_count.assert_called_once_with(SIGNER_ADDRESS, "pending")
        eth.estimate_gas.assert_called_once()
        eth.send_raw_transaction.assert_called_once()

    @pytest.mark.asyncio
    async def test_keeps_caller_gas(self, signer):
        await signer.sign_and_send_transaction(
            {"to": checksum(AUGUSTUS), "data": "0x1234", "value": 0, "gas": 450000, "chainId": CHAIN_ID}
        )
        signer.web3.eth.estimate_gas.assert_not_called()

    @pytest.mark.asyncio
    async def test_does_not_mutate_input(self, signer):
        params = {"to": checksum(AUGUSTUS), "data": "0x1234", "value": 0}
        await signer.sign_and_send_transaction(params)
        assert params == {"to": checksum(AUGUSTUS), "data": "0x1234", "value": 0}

    @pytest.mark.asyncio
    async def test_node_calls_run_off_the_event_loop_thread(self, signer):
        loop_thread = threading.get_ident()
        call_threads = []
        signer.web3.eth.get_transaction_count.side_effect = (
            lambda *args: call_threads.append(threading.get_ident()) or 7
        )

        await signer.sign_and_send_transaction({"to": checksum(AUGUSTUS), "data": "0x1234", "value": 0})

        assert call_threads and loop_thread not in call_threads


class TestWaitForConfirmation:
    """Tests for receipt polling."""

    @pytest.mark.asyncio
    async def test_returns_receipt(self, signer):
        signer.web3.eth.get_transaction_receipt.return_value = {"blockNumber": 12, "status": 1}

        receipt = await signer.wait_for_confirmation("0xabc")

        assert receipt == {"blockNumber": 12, "status": 1}

    @pytest.mark.asyncio
    async def test_polls_until_mined(self, signer):
        signer.web3.eth.get_transaction_receipt.side_effect = [
            TransactionNotFound("pending"),
            None,
            {"blockNumber": 13, "status": 0},
        ]

        receipt = await signer.wait_for_confirmation("0xabc")

        assert receipt["status"] == 0
        assert signer.web3.eth.get_transaction_receipt.call_count == 3

    @pytest.mark.asyncio
    async def test_timeout(self, signer):
        signer.web3.eth.get_transaction_receipt.return_value = None

        with pytest.raises(ConfirmationTimeout) as exc:
            await signer.wait_for_confirmation("0xabc", timeout=0)

        assert exc.value.tx_hash == "0xabc"
