"""Logging configuration for the API process and the ingestion CLI."""

import logging
import sys

_NOISY_LOGGERS = ("sqlalchemy.engine", "httpx", "httpcore", "aiosqlite", "asyncio")
_configured = False


def setup_logging(level: int | str = logging.INFO) -> None:
    """Send records to stdout; repeated calls only adjust the level."""
    global _configured  # noqa: PLW0603

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper() if isinstance(level, str) else level)
    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(handler)

    # Per-request HTTP and SQL chatter drowns out ingestion progress
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    _configured = True
