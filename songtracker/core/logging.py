"""
Logging utilities for the FastAPI application.

Provides a consistent logging format plus a helper for referring to session
handles in log lines without leaking them.
"""

import logging
import sys

_NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    # httpx logs every request URL at INFO, which includes query strings.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def mask_handle(handle: str | None) -> str:
    """Return a short, non-reversible prefix of a session handle for logs."""
    if not handle:
        return "<none>"
    return f"{handle[:6]}..."


__all__ = ["configure_logging", "mask_handle"]
