"""ERC-20 allowance check and escalation for the aggregator's transfer proxy.

Check-then-act against chain state is racy when several spenders share a
wallet. One logical owner per wallet is assumed; there is no optimistic
retry. Nonce ordering and on-chain allowance are the only serialization
points.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from web3 import Web3

from swaprelay.errors import ApprovalFailed
from swaprelay.swap.signer import ConfirmationTimeout, EVMSigner
from swaprelay.trace import TraceRecorder

logger = logging.getLogger(__name__)

MAX_UINT256 = 2**256 - 1

ERC20_ABI = [
    {
        "inputs": [{"name": "owner", "type": "address"}, {"name": "spender", "type": "address"}],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "spender", "type": "address"}, {"name": "amount", "type": "uint256"}],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]


@dataclass(frozen=True)
class AllowanceResult:
    """Outcome of an allowance check."""

    token: str
    spender: str
    escalated: bool
    current: int
    tx_hash: Optional[str] = None
    block: Optional[int] = None


class AllowanceManager:
    """Reads and, when short, raises a token allowance to MAX_UINT256."""

    def __init__(self, signer: EVMSigner):
        self.signer = signer

    @property
    def web3(self) -> Web3:
        return self.signer.web3

    def _token(self, token: str):
        return self.web3.eth.contract(address=Web3.to_checksum_address(token), abi=ERC20_ABI)

    async def read_allowance(self, token: str, owner: str, spender: str) -> int:
        call = self._token(token).functions.allowance(
            Web3.to_checksum_address(owner),
            Web3.to_checksum_address(spender),
        )
        return int(await self.signer.run_blocking(call.call))

    async def ensure_allowance(
        self,
        token: str,
        owner: str,
        spender: str,
        needed: int,
        trace: TraceRecorder,
    ) -> AllowanceResult:
        """Make sure ``spender`` may move at least ``needed`` of ``token``.

        Sufficient allowance is a no-op: no transaction is sent. Otherwise a
        single MAX_UINT256 approval is sent and awaited, so later swaps of
        the same token skip this step.

        Raises:
            ApprovalFailed: read or approval failed, reverted, or timed out
        """
        try:
            current = await self.read_allowance(token, owner, spender)
        except Exception as e:
            logger.error(f"Allowance read failed for {token}: {e}")
            raise ApprovalFailed(f"Could not read allowance: {type(e).__name__}: {e}") from e

        trace.record("ALLOWANCE", spender=spender, allowance=str(current), neededWei=str(needed))

        if current >= needed:
            return AllowanceResult(token=token, spender=spender, escalated=False, current=current)

        trace.record("APPROVING", spender=spender, amount="MaxUint256")
        tx_hash = None
        try:
            approve = self._token(token).functions.approve(
                Web3.to_checksum_address(spender), MAX_UINT256
            )
            tx = await self.signer.run_blocking(
                approve.build_transaction, {"from": self.signer.address}
            )
            tx_hash = await self.signer.sign_and_send_transaction(tx)
            trace.record("APPROVE_SENT", hash=tx_hash)
            receipt = await self.signer.wait_for_confirmation(tx_hash)
        except ConfirmationTimeout as e:
            raise ApprovalFailed(str(e), tx_hash=tx_hash) from e
        except Exception as e:
            logger.error(f"Approval of {spender} on {token} failed: {e}")
            raise ApprovalFailed(
                f"Approval transaction failed: {type(e).__name__}: {e}", tx_hash=tx_hash
            ) from e

        if receipt.get("status") != 1:
            raise ApprovalFailed(f"Approval transaction {tx_hash} reverted", tx_hash=tx_hash)

        trace.record("APPROVE_CONFIRMED", block=receipt.get("blockNumber"))
        logger.info(f"Approved {spender} for MaxUint256 on {token} (tx {tx_hash})")
        return AllowanceResult(
            token=token,
            spender=spender,
            escalated=True,
            current=current,
            tx_hash=tx_hash,
            block=receipt.get("blockNumber"),
        )
