"""Aggregator routing: quote and transaction-build clients."""

from swaprelay.routing.base import QuoteRoute, SwapTransaction
from swaprelay.routing.paraswap import ParaSwapClient, normalize_price_response

__all__ = [
    "QuoteRoute",
    "SwapTransaction",
    "ParaSwapClient",
    "normalize_price_response",
]
