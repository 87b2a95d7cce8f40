"""ParaSwap aggregator integration.

Two calls make up a swap:
- GET  /prices                      -> priced route (QuoteRoute)
- POST /transactions/{network}      -> ready-to-sign tx (SwapTransaction)

API docs: https://developers.paraswap.network/api/master
"""

import logging
from typing import Any, Optional

import httpx
from web3 import Web3

from swaprelay.errors import IncompleteTransaction, NoRoute, RouteMismatch, UpstreamError
from swaprelay.routing.base import QuoteRoute, SwapTransaction
from swaprelay.validation import AMOUNT_PATTERN, SwapRequest

logger = logging.getLogger(__name__)

PARASWAP_API_V5 = "https://apiv5.paraswap.io"

SIDE_SELL = "SELL"


def _present(value: Any) -> bool:
    return value is not None and value != ""


def _pick(body: dict, wrapper: Optional[dict], key: str) -> Any:
    """Read ``key`` from the ``priceRoute`` wrapper, falling back to top level."""
    if wrapper is not None and _present(wrapper.get(key)):
        return wrapper[key]
    return body.get(key)


def normalize_price_response(body: dict) -> QuoteRoute:
    """Extract the fields the workflow depends on from a /prices body.

    Precedence: a value nested under ``priceRoute`` wins over the same key
    at the top level. The route payload forwarded to the build step is the
    ``priceRoute`` object when present, otherwise the whole body.

    Raises:
        NoRoute: destAmount or tokenTransferProxy missing or unusable
    """
    wrapper = body.get("priceRoute") if isinstance(body.get("priceRoute"), dict) else None

    dest_amount = _pick(body, wrapper, "destAmount")
    proxy = _pick(body, wrapper, "tokenTransferProxy")

    if not _present(dest_amount) or not _present(proxy):
        raise NoRoute(body)
    if not AMOUNT_PATTERN.fullmatch(str(dest_amount)):
        raise NoRoute(body, reason=f"destAmount is not an integer: {dest_amount}")
    if not isinstance(proxy, str) or not Web3.is_address(proxy):
        raise NoRoute(body, reason=f"invalid tokenTransferProxy: {proxy}")

    return QuoteRoute(
        payload=wrapper if wrapper is not None else body,
        dest_amount=int(str(dest_amount)),
        token_transfer_proxy=Web3.to_checksum_address(proxy),
        raw=body,
    )


def _parse_int(value: Any, field: str, raw: dict) -> Optional[int]:
    """Parse an integer that may come as int, decimal string or hex string."""
    if not _present(value):
        return None
    try:
        if isinstance(value, str) and value.lower().startswith("0x"):
            return int(value, 16)
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Unparseable {field} in ParaSwap transaction: {value!r}")
        raise IncompleteTransaction(raw)


def parse_transaction(body: dict, chain_id: Optional[int] = None) -> SwapTransaction:
    """Turn a /transactions body into a SwapTransaction.

    Raises:
        IncompleteTransaction: ``to`` or ``data`` missing or malformed
    """
    to = body.get("to")
    data = body.get("data")
    if not _present(to) or not _present(data):
        raise IncompleteTransaction(body)
    if not isinstance(to, str) or not Web3.is_address(to):
        raise IncompleteTransaction(body)

    return SwapTransaction(
        to=Web3.to_checksum_address(to),
        data=data,
        value=_parse_int(body.get("value"), "value", body) or 0,
        gas=_parse_int(body.get("gas"), "gas", body),
        gas_price=_parse_int(body.get("gasPrice"), "gasPrice", body),
        chain_id=_parse_int(body.get("chainId"), "chainId", body) or chain_id,
        raw=body,
    )


class ParaSwapClient:
    """Client for the ParaSwap pricing and transaction-build API.

    The httpx client is owned by the caller (one per process) and must be
    configured with a bounded timeout.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        chain_id: int,
        base_url: str = PARASWAP_API_V5,
        partner: Optional[str] = None,
    ):
        self.http = http
        self.chain_id = chain_id
        self.base_url = base_url.rstrip("/")
        self.partner = partner

    def price_params(self, request: SwapRequest) -> dict:
        """Query parameters for GET /prices."""
        params = {
            "srcToken": request.token_from,
            "destToken": request.token_to,
            "amount": request.amount_wei,
            "side": SIDE_SELL,
            "network": self.chain_id,
            "userAddress": request.wallet,
            "slippage": f"{request.slippage_bps / 100:.4f}",
        }
        # Omitted entirely when nothing is excluded
        excluded = ",".join(request.exclude_dexs)
        if excluded:
            params["excludeDEXS"] = excluded
        return params

    def transaction_body(self, route: QuoteRoute, request: SwapRequest) -> dict:
        """JSON body for POST /transactions/{network}.

        Slippage only: ParaSwap rejects bodies carrying both slippage and
        destAmount, so destAmount is never sent.
        """
        body = {
            "priceRoute": route.payload,
            "srcToken": request.token_from,
            "destToken": request.token_to,
            "srcAmount": request.amount_wei,
            "userAddress": request.wallet,
            "slippage": request.slippage_percent,
        }
        if self.partner:
            body["partner"] = self.partner
        return body

    def check_route(self, route: QuoteRoute, request: SwapRequest) -> None:
        """Ensure the route was priced for this request.

        Only fields the route payload actually carries are compared.
        """
        expected = {
            "srcToken": request.token_from,
            "destToken": request.token_to,
            "srcAmount": request.amount_wei,
            "userAddress": request.wallet,
        }
        for field, wanted in expected.items():
            actual = route.route_field(field)
            if actual is not None and actual.lower() != wanted.lower():
                raise RouteMismatch(field, actual, wanted)

    async def get_route(self, request: SwapRequest) -> QuoteRoute:
        """Price a SELL of ``amount_wei`` token_from for token_to.

        Raises:
            NoRoute: no liquidity for the pair/amount
            UpstreamError: non-2xx, non-JSON or transport failure
        """
        body = await self._request("GET", "/prices", params=self.price_params(request))
        route = normalize_price_response(body)
        logger.info(
            f"ParaSwap route: {request.amount_wei} {request.token_from} -> "
            f"{route.dest_amount} {request.token_to} (proxy {route.token_transfer_proxy})"
        )
        return route

    async def build_transaction(self, route: QuoteRoute, request: SwapRequest) -> SwapTransaction:
        """Request a ready-to-sign transaction for a priced route.

        Raises:
            RouteMismatch: route was priced for a different request
            IncompleteTransaction: response lacks ``to`` or ``data``
            UpstreamError: non-2xx, non-JSON or transport failure
        """
        self.check_route(route, request)
        body = await self._request(
            "POST",
            f"/transactions/{self.chain_id}",
            json=self.transaction_body(route, request),
        )
        tx = parse_transaction(body, chain_id=self.chain_id)
        logger.info(f"ParaSwap tx built: to={tx.to} value={tx.value} gas={tx.gas}")
        return tx

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = await self.http.request(
                method,
                url,
                params=params,
                json=json,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error(f"ParaSwap {method} {path} failed: {type(e).__name__}: {e}")
            raise UpstreamError(f"ParaSwap request failed: {type(e).__name__}: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = response.text

        if not response.is_success:
            logger.warning(f"ParaSwap API error: {response.status_code} - {response.text}")
            message = None
            if isinstance(body, dict):
                message = body.get("error")
            raise UpstreamError(
                str(message or f"ParaSwap API error: {response.status_code}"),
                upstream_status=response.status_code,
                body=body,
            )

        if not isinstance(body, dict):
            raise UpstreamError(
                "ParaSwap returned a non-JSON body",
                upstream_status=response.status_code,
                body=body,
            )
        return body
