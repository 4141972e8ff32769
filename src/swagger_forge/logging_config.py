"""Process-wide structlog setup and the default diagnostic sink."""
import logging as py_logging
from typing import Callable, List

import structlog

from .config import LoggingConfig

DiagnosticLog = Callable[[List[str], str], None]

logger = structlog.get_logger(__name__)


def configure_logging(logging_config: LoggingConfig) -> None:
    """Configure stdlib logging and structlog from a LoggingConfig."""
    handlers = None
    if logging_config.file:
        handlers = [py_logging.FileHandler(logging_config.file)]

    py_logging.basicConfig(
        level=getattr(py_logging, logging_config.level.upper()),
        format="%(message)s",
        handlers=handlers,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.ConsoleRenderer(colors=True) if logging_config.format.lower() == "console"
            else structlog.processors.JSONRenderer(sort_keys=True),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logger.debug("Global logging configured.", logging_level=logging_config.level, logging_format=logging_config.format)


def structlog_diagnostic(tags: List[str], message: str) -> None:
    """Default diagnostic callback: 'error' tagged messages log as errors, the rest as warnings."""
    if "error" in tags:
        logger.error(message, tags=tags)
    else:
        logger.warning(message, tags=tags)
