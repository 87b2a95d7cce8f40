"""Health check endpoints."""

from fastapi import APIRouter, Request

from swaprelay import __version__

router = APIRouter()


def _summary(request: Request) -> dict:
    context = request.app.state.context
    return {
        "ok": True,
        "service": "swaprelay (paraswap)",
        "chainId": context.chain_id if context else request.app.state.settings.chain_id,
        "signer": context.signer_address if context else None,
    }


@router.get("/")
async def root(request: Request):
    """Service banner."""
    return _summary(request)


@router.get("/health")
async def health_check(request: Request):
    """Basic health check endpoint."""
    return _summary(request)


@router.get("/health/detailed")
async def detailed_health(request: Request):
    """Detailed health check with configuration info."""
    return {
        **_summary(request),
        "version": __version__,
        "config": request.app.state.settings.get_safe_dict(),
    }
