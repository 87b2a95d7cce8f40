"""Swap endpoint."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from swaprelay.api.schemas import SwapRequestBody
from swaprelay.context import SwapContext
from swaprelay.swap.executor import SwapExecutor

router = APIRouter()


def get_context(request: Request) -> SwapContext:
    return request.app.state.context


@router.post(
    "/swap",
    responses={
        200: {"description": "Swap sent and confirmed, or unsigned txData returned"},
        400: {"description": "Validation, no route, ParaSwap rejection, or signer mismatch"},
        500: {"description": "Internal error"},
        502: {"description": "Approval or broadcast failed, or ParaSwap unreachable"},
    },
)
async def swap(body: SwapRequestBody, context: SwapContext = Depends(get_context)) -> JSONResponse:
    """Swap tokenFrom -> tokenTo via ParaSwap.

    With ``unsignedOnly=false`` the server signs with its configured key,
    which must belong to ``wallet``. With ``unsignedOnly=true`` the
    response carries ``txData`` for the client to sign.

    Every response includes ``logs``, the ordered trace of the steps run.
    """
    outcome = await SwapExecutor(context).execute(body.model_dump())
    return JSONResponse(status_code=outcome.http_status, content=outcome.to_response())
