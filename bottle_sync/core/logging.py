"""Logging configuration module."""

import logging
from typing import cast

import structlog
from structlog import dev, processors, stdlib
from structlog.stdlib import BoundLogger

PACKAGE_LOGGER = "bottle_sync"

# Processors shared by structlog loggers and stdlib records from libraries
_SHARED_PROCESSORS = [
    stdlib.add_logger_name,
    stdlib.add_log_level,
    stdlib.PositionalArgumentsFormatter(),
    processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S.%f"),
    processors.dict_tracebacks,
]


def configure_logging(
    testing: bool = False, level: str = "info", json_logs: bool = True
) -> None:
    """Route structlog and stdlib logging through one root handler.

    Args:
        testing: Use plain key=value output regardless of json_logs
        level: Level name such as "info" or "DEBUG"; unknown names fall back to INFO
        json_logs: Render JSON lines instead of console output
    """
    log_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
    use_json = json_logs and not testing

    structlog.configure(
        processors=[
            stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            processors.format_exc_info,
            processors.JSONRenderer() if use_json else processors.KeyValueRenderer(),
        ],
        context_class=dict,
        logger_factory=stdlib.LoggerFactory(),
        wrapper_class=stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setLevel(log_level)
    handler.setFormatter(
        stdlib.ProcessorFormatter(
            processor=processors.JSONRenderer() if use_json else dev.ConsoleRenderer(),
            foreign_pre_chain=_SHARED_PROCESSORS,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(log_level)

    # Package records reach the root handler by propagation only
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers = []
    package_logger.propagate = True
    package_logger.setLevel(log_level)


def get_logger() -> BoundLogger:
    """Get a configured logger instance."""
    return cast(BoundLogger, structlog.get_logger())
