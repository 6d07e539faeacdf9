"""Structured logging configuration using structlog."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

SERVICE_NAME = "catalyst_watch"

# Third-party loggers that are chatty on every scan tick
NOISY_LOGGERS = ("yfinance", "peewee", "urllib3", "apscheduler.executors.default")


def _service_context(environment: str) -> Processor:
    def add_service_context(
        logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.setdefault("service", SERVICE_NAME)
        event_dict.setdefault("environment", environment)
        return event_dict

    return add_service_context


def setup_logging(
    level: str = "INFO",
    format_type: str = "structured",
    file_enabled: bool = True,
    file_path: str = "data/catalyst_watch.log",
    max_file_size: str = "10MB",
    backup_count: int = 5,
    environment: str = "development",
) -> None:
    """
    Set up application logging with structlog.

    Every event carries ``service`` and ``environment`` unless a bound logger
    already set them (services bind their own ``service`` name).

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: Log format ('structured' or 'plain')
        file_enabled: Whether to enable file logging
        file_path: Path to log file
        max_file_size: Maximum size of log file before rotation
        backup_count: Number of backup log files to keep
        environment: Deployment environment stamped on every event
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    processors: list[Processor] = [
        structlog.processors.TimeStamper(fmt="ISO", utc=True),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _service_context(environment),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if format_type == "structured" and file_enabled:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=format_type == "plain"))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    if file_enabled:
        _setup_file_logging(file_path, max_file_size, backup_count, log_level)


def _setup_file_logging(
    file_path: str,
    max_file_size: str,
    backup_count: int,
    log_level: int,
) -> None:
    """Attach one rotating file handler per log file to the root logger."""
    log_file = Path(file_path).resolve()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if (
            isinstance(handler, logging.handlers.RotatingFileHandler)
            and Path(handler.baseFilename) == log_file
        ):
            handler.setLevel(log_level)
            return

    file_handler = logging.handlers.RotatingFileHandler(
        filename=log_file,
        maxBytes=_parse_file_size(max_file_size),
        backupCount=backup_count,
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(file_handler)


def _parse_file_size(size_str: str) -> int:
    """Parse '512KB', '10MB', '1GB' or a plain byte count."""
    size_str = size_str.strip().upper()
    units = {"KB": 1024, "MB": 1024**2, "GB": 1024**3}

    multiplier = units.get(size_str[-2:])
    if multiplier:
        return int(size_str[:-2]) * multiplier
    return int(size_str)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger named after the calling module."""
    return structlog.get_logger(name)


def log_performance(
    operation: str,
    duration_ms: float,
    slow_ms: Optional[float] = None,
    **context: Any,
) -> None:
    """
    Log how long an operation took.

    Args:
        operation: Name of the operation
        duration_ms: Duration in milliseconds
        slow_ms: Log at WARNING when the duration exceeds this many ms
        **context: Additional context
    """
    logger = get_logger("performance")
    log = logger.warning if slow_ms is not None and duration_ms > slow_ms else logger.info
    log(
        "Performance metric",
        operation=operation,
        duration_ms=round(duration_ms, 2),
        **context,
    )
