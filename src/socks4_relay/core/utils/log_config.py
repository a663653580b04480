"""Logging configuration for the proxy server.

Centralized Loguru setup: a coloured console sink plus a rotating file sink
under the user's home directory. Library code only imports ``logger`` from
loguru; the sinks are installed once by the CLI.
"""

import sys
from pathlib import Path

from loguru import logger

LOG_DIR = Path.home() / ".socks4-relay" / "logs"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logging(debug: bool = False, log_dir: Path | None = LOG_DIR) -> None:
    """Install the console and file sinks.

    Args:
        debug: Log DEBUG and above to the console instead of INFO
        log_dir: Directory for ``proxy.log``, or None to skip the file sink
    """
    logger.remove()  # Remove default handler

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level="DEBUG" if debug else "INFO",
        backtrace=True,
        diagnose=debug,
    )

    if log_dir is None:
        return

    log_dir.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_dir / "proxy.log",
        rotation="10 MB",
        retention="1 week",
        compression="zip",
        format=FILE_FORMAT,
        level="DEBUG",
        backtrace=True,
        enqueue=True,
    )


__all__ = ["LOG_DIR", "logger", "setup_logging"]
