"""FastAPI application factory for the token safety API."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.cors import CORSMiddleware

from config.settings import settings
from src.api.middleware import SecurityHeadersMiddleware
from src.parsers.exceptions import TokenSafetyError, UnsupportedChainError
from src.parsers.onchain.chains import chain_name
from src.parsers.safety_check import TokenSafetyChecker

SERVICE_NAME = "Token Safety Check"
SERVICE_VERSION = "1.0.0"

# Rate limiter (shared instance)
limiter = Limiter(key_func=get_remote_address)


async def _token_safety_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Precondition violations -> 400 with a structured body."""
    body: dict = {"error": str(exc)}
    if isinstance(exc, UnsupportedChainError):
        body["chain_id"] = exc.chain_id
        body["supported_chains"] = exc.supported
    return JSONResponse(status_code=400, content=body)


def create_app(checker: TokenSafetyChecker | None = None) -> FastAPI:
    """Build and configure the FastAPI application.

    ``checker`` is built from settings on startup unless one is injected;
    only a checker built here is closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = checker is None
        app.state.checker = checker or TokenSafetyChecker.from_settings(settings)
        logger.info(f"On-chain analyzer initialized with {len(app.state.checker.supported_chains)} chains")
        try:
            yield
        finally:
            if owned:
                await app.state.checker.close()

    app = FastAPI(
        title=f"{SERVICE_NAME} API",
        version=SERVICE_VERSION,
        docs_url="/api/docs" if settings.api_debug else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if settings.api_debug else None,
        lifespan=lifespan,
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(TokenSafetyError, _token_safety_error_handler)

    # Security headers
    app.add_middleware(SecurityHeadersMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    from src.api.routers.health import router as health_router
    from src.api.routers.safety import router as safety_router

    app.include_router(health_router)
    app.include_router(safety_router)

    @app.get("/")
    async def service_info(request: Request) -> dict:
        supported = request.app.state.checker.supported_chains
        return {
            "service": SERVICE_NAME,
            "description": "Token safety analysis to detect honeypots and scams",
            "version": SERVICE_VERSION,
            "endpoints": {
                "analyze": "/api/v1/safety/check",
                "chains": "/api/v1/chains",
                "health": "/api/v1/health",
            },
            "features": [
                "Honeypot detection",
                "Contract verification check",
                "Tax analysis (buy/sell/transfer)",
                "Holder concentration analysis",
                "On-chain validation",
                "Multi-source aggregation",
                "Confidence scoring",
            ],
            "supported_chains": [
                {"chain_id": chain_id, "name": chain_name(chain_id)} for chain_id in supported
            ],
        }

    return app
