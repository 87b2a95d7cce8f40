"""Route and transaction types shared by the quote and build steps."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class QuoteRoute:
    """A priced route from the aggregator.

    ``payload`` is the opaque route object and must reach the build step
    exactly as received; re-deriving or editing it invalidates the quote.
    """

    payload: dict
    dest_amount: int
    token_transfer_proxy: str
    raw: dict = field(default_factory=dict, repr=False)

    def route_field(self, name: str) -> Optional[str]:
        """Read a top-level field of the route payload, if present."""
        value = self.payload.get(name)
        return None if value is None else str(value)


@dataclass(frozen=True)
class SwapTransaction:
    """A ready-to-sign swap transaction returned by the builder."""

    to: str
    data: str
    value: int = 0
    gas: Optional[int] = None
    gas_price: Optional[int] = None
    chain_id: Optional[int] = None
    raw: dict = field(default_factory=dict, repr=False)

    def to_tx_params(self) -> dict:
        """Transaction params for signing.

        ``gas`` is only set when the builder supplied one; the signer
        estimates it otherwise.
        """
        params = {
            "to": self.to,
            "data": self.data,
            "value": self.value,
        }
        if self.gas:
            params["gas"] = self.gas
        if self.chain_id is not None:
            params["chainId"] = self.chain_id
        return params

    def to_log(self) -> dict:
        return {
            "to": self.to,
            "value": str(self.value),
            "gasPrice": None if self.gas_price is None else str(self.gas_price),
            "gas": None if self.gas is None else str(self.gas),
        }
