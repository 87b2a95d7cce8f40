"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from swaprelay import __version__
from swaprelay.config import Settings, get_settings
from swaprelay.context import SwapContext, build_context

logger = logging.getLogger(__name__)

EMPTY_FIELD_MESSAGE = "required field is empty"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the shared context on startup unless one was injected."""
    http = None
    if app.state.context is None:
        settings: Settings = app.state.settings
        http = httpx.AsyncClient(timeout=settings.http_timeout)
        app.state.context = build_context(settings, http)
        logger.info(f"Swap context ready (chain {settings.chain_id})")
    yield
    if http is not None:
        await http.aclose()


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 with a readable message instead of FastAPI's 422."""
    errors = exc.errors()
    details = [
        {"loc": [str(p) for p in err.get("loc", ())], "msg": err.get("msg"), "type": err.get("type")}
        for err in errors
    ]

    if any(err.get("type") == "json_invalid" for err in errors):
        message = (
            "Invalid JSON body. Check commas and quotes, and send Content-Type: application/json."
        )
    else:
        missing = [
            str(err["loc"][-1])
            for err in errors
            if err.get("loc")
            and (err.get("type") == "missing" or EMPTY_FIELD_MESSAGE in str(err.get("msg", "")))
        ]
        if missing:
            message = f"Missing required fields: {', '.join(missing)}"
        else:
            message = (
                "Invalid body. Send JSON with wallet, tokenFrom, tokenTo, amountWei and slippageBps."
            )

    return JSONResponse(
        status_code=400,
        content={"ok": False, "error": message, "code": "InvalidRequest", "details": details},
    )


def create_app(
    settings: Optional[Settings] = None,
    context: Optional[SwapContext] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use (defaults to environment)
        context: Prebuilt swap context; when given, startup builds nothing
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="swaprelay API",
        description="Swap token -> token via ParaSwap, signed on the server or returned unsigned",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.add_exception_handler(RequestValidationError, request_validation_handler)

    from swaprelay.api.routes import health, swap

    app.include_router(health.router, tags=["Health"])
    app.include_router(swap.router, tags=["Swap"])

    return app
