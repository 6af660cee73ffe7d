"""
Logging setup for the API process.
"""
import logging

from app.core.config import LOG_LEVEL

_configured = False


def setup_logging() -> logging.Logger:
    """
    Configure root logging once for the whole process.

    Every module obtains its own logger with ``logging.getLogger(__name__)``
    and inherits this configuration.
    """
    global _configured

    if not _configured:
        logging.basicConfig(
            level=getattr(logging, LOG_LEVEL, logging.INFO),
            format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            handlers=[logging.StreamHandler()],
        )
        _configured = True

    return logging.getLogger("app")
