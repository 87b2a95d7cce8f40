"""Error taxonomy for the swap workflow.

Every error carries an HTTP status class so the API layer can map it
without knowing which stage raised it:

- 400: client input, no liquidity, upstream rejection or malformed upstream
  data, signer configuration
- 502: chain-stage failures (approval, broadcast) and unreachable upstreams
- 500: anything unexpected
"""

from typing import Any, Optional


class SwapError(Exception):
    """Base class for all swap workflow errors."""

    code = "SwapError"
    http_status = 400

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Serialize for an API response body."""
        data: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            data["details"] = self.details
        return data


# ======================
# Client input
# ======================


class InvalidRequest(SwapError):
    """Request body is structurally unusable."""

    code = "InvalidRequest"


class InvalidAddress(SwapError):
    """An address field is not a valid EVM address."""

    code = "InvalidAddress"

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(
            f"Invalid address in {field}: {value}",
            details={"field": field, "value": str(value)},
        )


class InvalidAmount(SwapError):
    """Source amount is not an unsigned integer string."""

    code = "InvalidAmount"

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            "Invalid amountWei (use a numeric string)",
            details={"field": "amountWei", "value": str(value)},
        )


class InvalidSlippage(SwapError):
    """Slippage is not an integer within [1, 2000] basis points."""

    code = "InvalidSlippage"

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            "Invalid slippageBps (integer in 1..2000)",
            details={"field": "slippageBps", "value": str(value)},
        )


# ======================
# Pricing / build service
# ======================


class NoRoute(SwapError):
    """Pricing service returned no usable route (no liquidity)."""

    code = "NoRoute"

    def __init__(self, raw: Any, reason: str = "missing destAmount/tokenTransferProxy"):
        self.raw = raw
        super().__init__(
            f"ParaSwap returned no route ({reason}). No route or no liquidity.",
            details={"raw": raw},
        )


class UpstreamError(SwapError):
    """Pricing or build service rejected the request or was unreachable."""

    code = "UpstreamError"

    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        body: Any = None,
    ):
        self.upstream_status = upstream_status
        self.body = body
        super().__init__(
            message,
            details={"upstreamStatus": upstream_status, "body": body},
        )

    @property
    def http_status(self) -> int:
        # No status: the request never got an answer
        return 400 if self.upstream_status is not None else 502


class IncompleteTransaction(SwapError):
    """Build service response lacks destination address or call data."""

    code = "IncompleteTransaction"

    def __init__(self, raw: Any):
        self.raw = raw
        super().__init__("ParaSwap did not return a complete transaction", details={"raw": raw})


class RouteMismatch(SwapError):
    """Pricing service returned a route for a different request."""

    code = "RouteMismatch"

    def __init__(self, field: str, route_value: Any, request_value: Any):
        super().__init__(
            f"Quoted route does not match request on {field}",
            details={"field": field, "route": str(route_value), "request": str(request_value)},
        )


# ======================
# Signing identity
# ======================


class SigningIdentityMissing(SwapError):
    """Signed mode requested but the server holds no signing key."""

    code = "SigningIdentityMissing"

    def __init__(self):
        super().__init__(
            "PRIVATE_KEY is not configured on the server. "
            "Use unsignedOnly=true or configure PRIVATE_KEY and RPC_URL."
        )


class WalletSignerMismatch(SwapError):
    """Request wallet differs from the server's signing address."""

    code = "WalletSignerMismatch"

    def __init__(self, wallet: str, signer: str):
        self.wallet = wallet
        self.signer = signer
        super().__init__(
            f"wallet ({wallet}) does not match the server signer ({signer})",
            details={"wallet": wallet, "signer": signer},
        )


# ======================
# Chain execution
# ======================


class ApprovalFailed(SwapError):
    """Allowance escalation reverted, timed out, or could not be sent."""

    code = "ApprovalFailed"
    http_status = 502

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        self.tx_hash = tx_hash
        super().__init__(message, details={"txHash": tx_hash} if tx_hash else None)


class BroadcastFailed(SwapError):
    """Swap transaction could not be sent or confirmed."""

    code = "BroadcastFailed"
    http_status = 502

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        self.tx_hash = tx_hash
        super().__init__(message, details={"txHash": tx_hash} if tx_hash else None)


class InternalError(SwapError):
    """Unexpected failure inside the workflow."""

    code = "InternalError"
    http_status = 500
