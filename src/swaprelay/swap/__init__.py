"""Swap execution: allowance handling, signing, and the stage pipeline."""

from swaprelay.swap.allowance import MAX_UINT256, AllowanceManager, AllowanceResult
from swaprelay.swap.executor import StageResult, SwapExecutor, SwapOutcome
from swaprelay.swap.signer import ConfirmationTimeout, EVMSigner

__all__ = [
    "MAX_UINT256",
    "AllowanceManager",
    "AllowanceResult",
    "StageResult",
    "SwapExecutor",
    "SwapOutcome",
    "ConfirmationTimeout",
    "EVMSigner",
]
