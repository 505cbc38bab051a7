"""
Shared helpers: logger factory and request client hints.
"""
import logging
from typing import Optional

from starlette.requests import Request

from orgguard.core import config


_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_configured = False


def _configure_root() -> None:
    global _configured
    if _configured:
        return
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(config.LOG_LEVEL)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger.

    Usage:
        log = get_logger(__name__)
        log.info("Seeding permissions")
    """
    _configure_root()
    return logging.getLogger(name)


def client_context(request: Optional[Request]) -> dict[str, Optional[str]]:
    """Client IP and user agent for activity/audit entries."""
    if request is None:
        return {"ip_address": None, "user_agent": None}
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }
