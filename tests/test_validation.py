"""Tests for request validation."""

import pytest

from fakes import SIGNER_ADDRESS, USDT, WBTC, checksum, swap_request
from swaprelay.errors import InvalidAddress, InvalidAmount, InvalidRequest, InvalidSlippage
from swaprelay.validation import (
    validate_address,
    validate_amount,
    validate_exclusions,
    validate_slippage,
    validate_swap_request,
)


def _flip_first_letter(address: str) -> str:
    """Break an EIP-55 checksum by flipping one letter's case."""
    body = address[2:]
    for i, ch in enumerate(body):
        if ch.isalpha():
            return "0x" + body[:i] + ch.swapcase() + body[i + 1:]
    raise AssertionError("address has no letters")


class TestValidateAddress:
    """Tests for address validation."""

    def test_lowercase_is_checksummed(self):
        assert validate_address(USDT, "tokenFrom") == checksum(USDT)

    def test_checksummed_passes_through(self):
        assert validate_address(SIGNER_ADDRESS, "wallet") == SIGNER_ADDRESS

    def test_surrounding_whitespace_ignored(self):
        assert validate_address(f"  {WBTC} ", "tokenTo") == checksum(WBTC)

    @pytest.mark.parametrize(
        "value",
        ["", "0x123", "not-an-address", "0x" + "g" * 40, None, 12345, ["0x"]],
    )
    def test_malformed_rejected(self, value):
        with pytest.raises(InvalidAddress) as exc:
            validate_address(value, "tokenTo")
        assert exc.value.field == "tokenTo"
        assert "tokenTo" in exc.value.message

    def test_bad_checksum_rejected(self):
        broken = _flip_first_letter(checksum(USDT))
        with pytest.raises(InvalidAddress):
            validate_address(broken, "tokenFrom")


class TestValidateAmount:
    """Tests for amount validation."""

    @pytest.mark.parametrize("value", ["0", "18703660", "1" + "0" * 60])
    def test_valid_amounts_unchanged(self, value):
        assert validate_amount(value) == value

    def test_integer_accepted_as_string(self):
        assert validate_amount(18703660) == "18703660"

    @pytest.mark.parametrize(
        "value",
        ["", "-1", "1.5", "1e18", " 10", "0x10", "abc", "١٢٣", None, True, 1.5],
    )
    def test_invalid_amounts(self, value):
        with pytest.raises(InvalidAmount):
            validate_amount(value)


class TestValidateSlippage:
    """Tests for slippage validation."""

    @pytest.mark.parametrize("value,expected", [(1, 1), (2000, 2000), (120, 120), ("50", 50), (300.0, 300)])
    def test_valid(self, value, expected):
        assert validate_slippage(value) == expected

    @pytest.mark.parametrize("value", [0, 2001, -5, 1.5, "abc", "", None, True])
    def test_invalid(self, value):
        with pytest.raises(InvalidSlippage):
            validate_slippage(value)


class TestValidateExclusions:
    """Tests for the excluded DEX list."""

    def test_none_is_empty(self):
        assert validate_exclusions(None) == ()

    def test_blank_entries_dropped(self):
        assert validate_exclusions(["Dexalot", " ", "", "UniswapV3 "]) == ("Dexalot", "UniswapV3")

    def test_non_list_rejected(self):
        with pytest.raises(InvalidRequest):
            validate_exclusions("Dexalot")


class TestValidateSwapRequest:
    """Tests for full request validation."""

    def test_valid_request(self):
        request = validate_swap_request(swap_request(excludeDexs=["Dexalot"]))

        assert request.wallet == SIGNER_ADDRESS
        assert request.token_from == checksum(USDT)
        assert request.token_to == checksum(WBTC)
        assert request.amount_wei == "18703660"
        assert request.amount == 18703660
        assert request.slippage_bps == 120
        assert request.slippage_percent == 1.2
        assert request.exclude_dexs == ("Dexalot",)
        assert request.unsigned_only is True

    def test_request_is_immutable(self):
        request = validate_swap_request(swap_request())
        with pytest.raises(AttributeError):
            request.amount_wei = "1"

    def test_names_offending_field(self):
        with pytest.raises(InvalidAddress) as exc:
            validate_swap_request(swap_request(tokenTo="0xnope"))
        assert exc.value.field == "tokenTo"

    def test_unsigned_only_defaults_false(self):
        body = swap_request()
        del body["unsignedOnly"]
        assert validate_swap_request(body).unsigned_only is False
