"""
Structured logging for fixture runs.

Library modules only call structlog.get_logger(). A test session calls
setup_logging() once, usually from conftest.py, to route those events
through stdlib logging to the console and optionally a file.
"""
import logging
import sys
from typing import Iterable, Optional

import structlog

LOGGER_NAMESPACE = "exchange_fixtures"

# web3 and its HTTP stack log every RPC request at DEBUG
NOISY_LOGGERS = ("web3", "urllib3", "asyncio")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(json_output: bool) -> list[structlog.types.Processor]:
    if json_output:
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        structlog.dev.ConsoleRenderer(
            colors=False,
            exception_formatter=structlog.dev.plain_traceback,
        ),
    ]


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> structlog.stdlib.BoundLogger:
    """Route fixture logs to stdout (and optionally a file).

    Args:
        level: Log level name; unknown names fall back to INFO.
        json_output: Render one JSON object per line instead of console text.
        log_file: Also write every record to this file.
        quiet_loggers: Third-party loggers capped at WARNING.

    Returns:
        Logger for the package namespace.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setLevel(log_level)

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        handlers=handlers,
        force=True,
    )
    for name in quiet_loggers:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    structlog.configure(
        processors=_shared_processors() + _renderer(json_output),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger(LOGGER_NAMESPACE)


def get_logger(name: str = LOGGER_NAMESPACE) -> structlog.stdlib.BoundLogger:
    """Logger under the exchange_fixtures namespace.

    "chain" becomes "exchange_fixtures.chain"; names already in the
    namespace are kept.
    """
    if not name.startswith(LOGGER_NAMESPACE):
        name = f"{LOGGER_NAMESPACE}.{name}"
    return structlog.get_logger(name)
