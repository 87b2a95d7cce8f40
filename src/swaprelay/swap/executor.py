"""Swap execution pipeline.

Stages run strictly in order, each feeding the next:

    validate -> signer check -> quote -> allowance -> build -> execute

The signer check and allowance stages only run in signed mode. Every stage
returns a StageResult instead of raising, so the first failure ends the run
with the trace recorded up to that point. Nothing is retried.

Partial failure: an allowance raised by the allowance stage stays on-chain
when a later stage fails. It is reported in the error details and the
trace, never rolled back, and a retry will find it sufficient.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, Optional, TypeVar

from swaprelay.errors import (
    BroadcastFailed,
    InternalError,
    NoRoute,
    SigningIdentityMissing,
    SwapError,
    WalletSignerMismatch,
)
from swaprelay.routing.base import QuoteRoute, SwapTransaction
from swaprelay.swap.allowance import AllowanceResult
from swaprelay.trace import TraceRecorder
from swaprelay.validation import SwapRequest, validate_swap_request

if TYPE_CHECKING:
    from swaprelay.context import SwapContext

logger = logging.getLogger(__name__)

T = TypeVar("T")

MODE_UNSIGNED = "unsignedOnly"


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """Tagged result of one pipeline stage: a value or a typed error."""

    stage: str
    value: Optional[T] = None
    error: Optional[SwapError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, stage: str, value: T) -> "StageResult[T]":
        return cls(stage=stage, value=value)

    @classmethod
    def failure(cls, stage: str, error: SwapError) -> "StageResult[T]":
        return cls(stage=stage, error=error)


@dataclass
class SwapOutcome:
    """Final result of a swap request, success or failure."""

    trace: TraceRecorder
    result: dict = field(default_factory=dict)
    error: Optional[SwapError] = None
    stage: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def http_status(self) -> int:
        return 200 if self.ok else self.error.http_status

    def to_response(self) -> dict:
        """Response body; always includes the trace as ``logs``."""
        if self.ok:
            return {"ok": True, **self.result, "logs": self.trace.render()}
        return {"ok": False, **self.error.to_dict(), "logs": self.trace.render()}


class SwapExecutor:
    """Runs the swap pipeline against a shared, read-only SwapContext."""

    def __init__(self, context: "SwapContext"):
        self.context = context

    async def execute(self, raw: Mapping) -> SwapOutcome:
        """Execute one swap request.

        Args:
            raw: Inbound request fields (wallet, tokenFrom, tokenTo,
                amountWei, slippageBps, excludeDexs, unsignedOnly)

        Returns:
            SwapOutcome carrying the result or the failing stage's error,
            plus the step trace in both cases
        """
        trace = TraceRecorder()
        try:
            return await self._run(raw, trace)
        except Exception as e:
            logger.exception(f"Unexpected swap failure: {e}")
            error = InternalError(f"{type(e).__name__}: {e}")
            trace.record("ERROR", stage="internal", code=error.code, error=error.message)
            return SwapOutcome(trace=trace, error=error, stage="internal")

    async def _run(self, raw: Mapping, trace: TraceRecorder) -> SwapOutcome:
        validated = self._validate(raw, trace)
        if not validated.ok:
            return self._fail(validated, trace)
        request = validated.value

        if not request.unsigned_only:
            identity = self._check_signer(request, trace)
            if not identity.ok:
                return self._fail(identity, trace)

        quoted = await self._quote(request, trace)
        if not quoted.ok:
            return self._fail(quoted, trace)
        route = quoted.value

        allowance: Optional[AllowanceResult] = None
        if not request.unsigned_only:
            approved = await self._allowance(request, route, trace)
            if not approved.ok:
                return self._fail(approved, trace)
            allowance = approved.value

        built = await self._build(request, route, trace)
        if not built.ok:
            return self._fail(built, trace, allowance)
        tx = built.value

        if request.unsigned_only:
            return SwapOutcome(
                trace=trace,
                result={
                    "mode": MODE_UNSIGNED,
                    "txData": tx.raw,
                    "destAmount": str(route.dest_amount),
                },
            )

        sent = await self._broadcast(tx, trace)
        if not sent.ok:
            return self._fail(sent, trace, allowance)

        return SwapOutcome(trace=trace, result={**sent.value, "destAmount": str(route.dest_amount)})

    # ======================
    # Stages
    # ======================

    def _validate(self, raw: Mapping, trace: TraceRecorder) -> StageResult[SwapRequest]:
        try:
            request = validate_swap_request(raw)
        except SwapError as e:
            return StageResult.failure("validate", e)
        trace.record("WALLET", **request.to_log())
        return StageResult.success("validate", request)

    def _check_signer(self, request: SwapRequest, trace: TraceRecorder) -> StageResult[str]:
        signer = self.context.signer
        if signer is None:
            return StageResult.failure("signer", SigningIdentityMissing())
        if not signer.matches(request.wallet):
            return StageResult.failure("signer", WalletSignerMismatch(request.wallet, signer.address))
        trace.record("SIGNER", address=signer.address)
        return StageResult.success("signer", signer.address)

    async def _quote(self, request: SwapRequest, trace: TraceRecorder) -> StageResult[QuoteRoute]:
        paraswap = self.context.paraswap
        trace.record("PARASWAP_PRICES", **paraswap.price_params(request))
        try:
            route = await paraswap.get_route(request)
        except NoRoute as e:
            trace.record("NO_ROUTE", raw=e.raw)
            return StageResult.failure("quote", e)
        except SwapError as e:
            return StageResult.failure("quote", e)

        trace.record(
            "PRICE_OK",
            destAmount=str(route.dest_amount),
            tokenTransferProxy=route.token_transfer_proxy,
        )
        return StageResult.success("quote", route)

    async def _allowance(
        self,
        request: SwapRequest,
        route: QuoteRoute,
        trace: TraceRecorder,
    ) -> StageResult[AllowanceResult]:
        try:
            result = await self.context.allowances.ensure_allowance(
                token=request.token_from,
                owner=request.wallet,
                spender=route.token_transfer_proxy,
                needed=request.amount,
                trace=trace,
            )
        except SwapError as e:
            return StageResult.failure("allowance", e)
        return StageResult.success("allowance", result)

    async def _build(
        self,
        request: SwapRequest,
        route: QuoteRoute,
        trace: TraceRecorder,
    ) -> StageResult[SwapTransaction]:
        trace.record(
            "PARASWAP_TX_BODY",
            userAddress=request.wallet,
            slippage=request.slippage_percent,
        )
        try:
            tx = await self.context.paraswap.build_transaction(route, request)
        except SwapError as e:
            if e.details.get("raw") is not None:
                trace.record("TX_INCOMPLETE", raw=e.details["raw"])
            return StageResult.failure("build", e)

        trace.record("TX_OK", **tx.to_log())
        return StageResult.success("build", tx)

    async def _broadcast(self, tx: SwapTransaction, trace: TraceRecorder) -> StageResult[dict]:
        signer = self.context.signer
        try:
            tx_hash = await signer.sign_and_send_transaction(tx.to_tx_params())
        except Exception as e:
            logger.error(f"Swap broadcast failed: {e}")
            return StageResult.failure(
                "broadcast", BroadcastFailed(f"Broadcast failed: {type(e).__name__}: {e}")
            )
        trace.record("SENT", hash=tx_hash)

        try:
            receipt = await signer.wait_for_confirmation(tx_hash)
        except Exception as e:
            logger.error(f"Swap {tx_hash} not confirmed: {e}")
            return StageResult.failure(
                "broadcast",
                BroadcastFailed(f"Confirmation failed: {type(e).__name__}: {e}", tx_hash=tx_hash),
            )

        block = receipt.get("blockNumber")
        status = receipt.get("status")
        trace.record("CONFIRMED", block=block, status=status)
        if status != 1:
            logger.warning(f"Swap {tx_hash} reverted in block {block}")

        return StageResult.success("broadcast", {"hash": tx_hash, "block": block, "status": status})

    # ======================
    # Failure reporting
    # ======================

    def _fail(
        self,
        result: StageResult[Any],
        trace: TraceRecorder,
        allowance: Optional[AllowanceResult] = None,
    ) -> SwapOutcome:
        error = result.error
        if allowance is not None and allowance.escalated:
            error.details.update(
                allowanceEscalated=True,
                spender=allowance.spender,
                approvalHash=allowance.tx_hash,
            )
            trace.record(
                "ALLOWANCE_RETAINED",
                token=allowance.token,
                spender=allowance.spender,
                approvalHash=allowance.tx_hash,
                block=allowance.block,
            )

        trace.record("ERROR", stage=result.stage, code=error.code, error=error.message)
        logger.warning(f"Swap failed at {result.stage}: {error.code}: {error.message}")
        return SwapOutcome(trace=trace, error=error, stage=result.stage)
