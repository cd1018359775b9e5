"""Entry point for the token safety API."""

import asyncio

from loguru import logger

from config.settings import settings
from src.api.server import run_api_server
from src.utils.logger import setup_logger


async def main() -> None:
    setup_logger(level=settings.log_level, json_logs=settings.json_logs, log_dir=settings.log_dir)
    logger.info("Starting token safety check...")

    rpc_urls = settings.rpc_urls()
    if not rpc_urls:
        logger.warning("No RPC URLs configured; every chain will be rejected as unsupported")

    try:
        await run_api_server()
    finally:
        logger.info("Shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())
