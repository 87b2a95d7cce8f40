"""Address, amount and slippage validation for inbound swap requests.

Pure functions: no network access, no state.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from web3 import Web3

from swaprelay.errors import InvalidAddress, InvalidAmount, InvalidRequest, InvalidSlippage

AMOUNT_PATTERN = re.compile(r"[0-9]+")

MIN_SLIPPAGE_BPS = 1
MAX_SLIPPAGE_BPS = 2000


@dataclass(frozen=True)
class SwapRequest:
    """A validated swap request. Immutable once built."""

    wallet: str
    token_from: str
    token_to: str
    amount_wei: str
    slippage_bps: int
    exclude_dexs: tuple[str, ...] = ()
    unsigned_only: bool = False

    @property
    def amount(self) -> int:
        return int(self.amount_wei)

    @property
    def slippage_percent(self) -> float:
        """Slippage as a percentage, e.g. 120 bps -> 1.2."""
        return round(self.slippage_bps / 100, 4)

    def to_log(self) -> dict:
        return {
            "wallet": self.wallet,
            "tokenFrom": self.token_from,
            "tokenTo": self.token_to,
            "amountWei": self.amount_wei,
            "slippageBps": self.slippage_bps,
            "excludeDexs": list(self.exclude_dexs),
            "unsignedOnly": self.unsigned_only,
        }


def validate_address(value: Any, field: str) -> str:
    """Return the checksummed form of an address or raise InvalidAddress."""
    if not isinstance(value, str) or not Web3.is_address(value.strip()):
        raise InvalidAddress(field, value)
    return Web3.to_checksum_address(value.strip())


def validate_amount(value: Any) -> str:
    """Return the amount as a decimal string of ASCII digits."""
    if isinstance(value, bool) or value is None:
        raise InvalidAmount(value)
    amount = str(value)
    if not AMOUNT_PATTERN.fullmatch(amount):
        raise InvalidAmount(value)
    return amount


def validate_slippage(value: Any) -> int:
    """Return slippage in basis points, bounded to [1, 2000]."""
    if isinstance(value, bool):
        raise InvalidSlippage(value)

    if isinstance(value, int):
        bps = value
    elif isinstance(value, float) and value.is_integer():
        bps = int(value)
    elif isinstance(value, str) and AMOUNT_PATTERN.fullmatch(value.strip()):
        bps = int(value.strip())
    else:
        raise InvalidSlippage(value)

    if not MIN_SLIPPAGE_BPS <= bps <= MAX_SLIPPAGE_BPS:
        raise InvalidSlippage(value)
    return bps


def validate_exclusions(value: Any) -> tuple[str, ...]:
    """Normalize the excluded-DEX list, dropping blank entries."""
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise InvalidRequest(
            "excludeDexs must be a list of strings",
            details={"field": "excludeDexs"},
        )
    return tuple(v.strip() for v in value if v.strip())


def validate_swap_request(raw: Mapping) -> SwapRequest:
    """Validate an inbound request mapping into a SwapRequest.

    Keys follow the HTTP body: wallet, tokenFrom, tokenTo, amountWei,
    slippageBps, excludeDexs, unsignedOnly.
    """
    return SwapRequest(
        wallet=validate_address(raw.get("wallet"), "wallet"),
        token_from=validate_address(raw.get("tokenFrom"), "tokenFrom"),
        token_to=validate_address(raw.get("tokenTo"), "tokenTo"),
        amount_wei=validate_amount(raw.get("amountWei")),
        slippage_bps=validate_slippage(raw.get("slippageBps")),
        exclude_dexs=validate_exclusions(raw.get("excludeDexs")),
        unsigned_only=bool(raw.get("unsignedOnly", False)),
    )
