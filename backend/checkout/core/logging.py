"""Logging setup."""

import logging
import sys

from checkout.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Headers never written to logs verbatim
SENSITIVE_HEADERS = frozenset({"authorization", "proxy-authorization", "cookie"})


def setup_logging(level: str | None = None) -> None:
    """Configure root logger to write to stdout."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get module logger."""
    return logging.getLogger(name)


def mask_headers(headers: dict[str, str]) -> dict[str, str]:
    """Return a copy of headers safe for logging."""
    masked = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            masked[key] = f"{value[:6]}***" if len(value) > 6 else "***"
        else:
            masked[key] = value
    return masked
