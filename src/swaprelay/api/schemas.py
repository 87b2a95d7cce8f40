"""Inbound request body for the swap endpoint.

Only presence is checked here. Address, amount and slippage rules belong to
swaprelay.validation so they produce typed errors and a trace.
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SwapRequestBody(BaseModel):
    """POST /swap body."""

    model_config = ConfigDict(extra="ignore")

    wallet: str = Field(..., description="Wallet that sells tokenFrom", examples=["0x4682beffFE9d3BCDa67cC6a8aDBb437Dcc46219F"])
    tokenFrom: str = Field(..., description="Token sold", examples=["0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9"])
    tokenTo: str = Field(..., description="Token bought", examples=["0x2f2a2543B76A4166549F7aaB2e75Bef0aefC5B0f"])
    amountWei: Union[str, int] = Field(..., description="Amount of tokenFrom in base units", examples=["18703660"])
    slippageBps: Union[int, float, str] = Field(..., description="Slippage tolerance, 1..2000 bps", examples=[120])
    excludeDexs: Optional[list[str]] = Field(default=None, description="DEXs to exclude", examples=[["Dexalot"]])
    unsignedOnly: bool = Field(
        default=False,
        description="Return txData for client-side signing instead of using the server key",
    )

    @field_validator("wallet", "tokenFrom", "tokenTo", "amountWei", "slippageBps", mode="before")
    @classmethod
    def not_empty(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("required field is empty")
        return value
