"""Uvicorn runner for the token safety API."""

from __future__ import annotations

import uvicorn
from loguru import logger

from config.settings import settings


async def run_api_server() -> None:
    """Serve ``create_app()`` on ``API_HOST:API_PORT`` until shutdown.

    Runs on the caller's event loop. Uvicorn's own access log is only
    enabled with ``API_DEBUG``; each check is already logged as ``[SAFETY]``.
    """
    from src.api.app import create_app

    config = uvicorn.Config(
        app=create_app(),
        host=settings.api_host,
        port=settings.api_port,
        log_level="info" if settings.api_debug else "warning",
        access_log=settings.api_debug,
        loop="none",
    )
    server = uvicorn.Server(config)

    chains = settings.rpc_urls()
    logger.info(
        f"[API] Listening on http://{settings.api_host}:{settings.api_port} "
        f"({len(chains)} chain(s), check limit {settings.check_rate_limit})"
    )
    await server.serve()
