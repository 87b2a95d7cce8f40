"""Process-wide, read-only swap context.

Built once at startup from Settings and handed to the executor by
reference. Requests never mutate it.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from web3 import Web3

from swaprelay.config import Settings
from swaprelay.routing.paraswap import ParaSwapClient
from swaprelay.swap.allowance import AllowanceManager
from swaprelay.swap.signer import EVMSigner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapContext:
    """Shared collaborators for swap requests."""

    chain_id: int
    paraswap: ParaSwapClient
    signer: Optional[EVMSigner] = None

    @property
    def allowances(self) -> Optional[AllowanceManager]:
        return AllowanceManager(self.signer) if self.signer is not None else None

    @property
    def signer_address(self) -> Optional[str]:
        return self.signer.address if self.signer is not None else None


def build_web3(settings: Settings) -> Web3:
    """Create the JSON-RPC connection used by the signer."""
    return Web3(
        Web3.HTTPProvider(settings.rpc_url, request_kwargs={"timeout": settings.rpc_timeout})
    )


def build_context(settings: Settings, http: httpx.AsyncClient) -> SwapContext:
    """Assemble the context from settings.

    Args:
        settings: Application settings
        http: Shared HTTP client for ParaSwap (closed by the caller)
    """
    signer = None
    if settings.has_signer:
        signer = EVMSigner.from_private_key(
            build_web3(settings),
            settings.private_key,
            confirmation_timeout=settings.confirmation_timeout,
            poll_interval=settings.confirmation_poll_interval,
        )
        logger.info(f"Server signer loaded: {signer.address}")
    elif settings.private_key:
        logger.warning("PRIVATE_KEY set without RPC_URL - signer not loaded")
    else:
        logger.warning("PRIVATE_KEY not set - server-side signing disabled")

    paraswap = ParaSwapClient(
        http,
        chain_id=settings.chain_id,
        base_url=settings.paraswap_base,
        partner=settings.paraswap_partner,
    )

    return SwapContext(
        chain_id=settings.chain_id,
        paraswap=paraswap,
        signer=signer,
    )
