"""
FastAPI application for the account lifecycle service.

The lifespan wires one in-memory repository and the domain services into
``app.state``; all state is discarded on shutdown.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.api.dependencies import init_services
from src.api.v1 import router as v1_router
from src.config.settings import get_settings
from src.domain.exceptions import AccountError

logger = logging.getLogger(__name__)

tags_metadata = [
    {
        "name": "v1",
        "description": "Account Lifecycle API v1 - Register, verify, subscribe and spend credits",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    init_services(app.state, settings)
    logger.info(
        "Services ready (strong_passwords=%s, code_ttl_seconds=%s)",
        settings.strong_passwords,
        settings.code_ttl_seconds,
    )

    yield

    app.state.repository.reset()
    logger.info("Shutdown complete, in-memory state discarded")


app = FastAPI(
    title="teach-accounts",
    description="Account Lifecycle API - Registration, email verification, "
    "subscription activation and credit ledger",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.include_router(v1_router, prefix="/v1")


@app.exception_handler(AccountError)
async def account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
    """Domain errors a route does not map itself become 400s."""
    logger.warning("Unmapped %s on %s: %s", type(exc).__name__, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """Report whether startup has wired the domain services."""
    if not hasattr(request.app.state, "registry"):
        return {"status": "starting"}
    return {"status": "healthy"}
