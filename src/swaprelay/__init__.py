"""swaprelay - token swaps through ParaSwap with optional server-side signing."""

__version__ = "0.1.0"
