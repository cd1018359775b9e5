"""Loguru setup for the token safety API."""

import os
import sys

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level>"
)


def setup_logger(*, json_logs: bool = False, level: str = "INFO", log_dir: str = "logs") -> None:
    """Replace loguru's default sink with the service sinks.

    The console shows one line per check (``[SAFETY]``) plus source failures
    at WARNING. Per-attempt retry chatter from ``[HONEYPOT]`` and
    ``[ONCHAIN]`` is DEBUG and only lands in the daily file under
    ``log_dir``; an empty ``log_dir`` disables the file sink.
    ``LOG_LEVEL`` in the environment overrides ``level``.
    """
    console_level = os.getenv("LOG_LEVEL", level).upper()
    logger.remove()

    if json_logs:
        logger.add(sys.stdout, serialize=True, level=console_level)
    else:
        logger.add(sys.stdout, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    if not log_dir:
        return

    logger.add(
        os.path.join(log_dir, "token_safety_{time:YYYY-MM-DD}.log"),
        rotation="50 MB",
        retention="3 days",
        compression="gz",
        level="DEBUG",
        serialize=json_logs,
        diagnose=False,  # tracebacks without local variable values
    )
    logger.debug(f"File logging to {log_dir}/ (console level {console_level})")
