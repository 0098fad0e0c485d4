"""Structured logging for the money_manager package.

``configure_logging()`` is called once by the application at startup; library
modules only call ``get_logger(__name__)`` and log events with key/value
context, e.g. ``logger.info("transfer_applied", transfer_id=7)``.
"""

import logging
import sys
from typing import Optional, Union

import structlog

from money_manager.core.config import LOG_LEVEL

_CONFIGURED = False


def _parse_level(level: Optional[Union[int, str]]) -> int:
    if isinstance(level, int):
        return level
    name = str(level or LOG_LEVEL).strip().upper()
    if name.isdigit():
        return int(name)
    numeric = getattr(logging, name, None)
    return numeric if isinstance(numeric, int) else logging.INFO


def configure_logging(level: Optional[Union[int, str]] = None) -> None:
    """Route structlog through stdlib logging with a JSON renderer, once."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=_parse_level(level),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True


def get_logger(name: str):
    return structlog.get_logger(name)
