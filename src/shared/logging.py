"""
Logging Configuration - Shared Layer

structlog on top of stdlib logging. Every layer logs dotted event names with
key/value context (``workflow.started``, ``planning.data.loaded``), and the
workflow id bound by ``bind_workflow_context`` is attached to each event of
a run. Development output is rendered for the console, production output as
JSON lines.
"""

import logging
import os
import sys
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

import structlog
from structlog.types import Processor

from src.shared.consts import EnumEnvironment

QUIET_LOGGERS = ("httpx", "httpcore")


def _enum_value(value: Any) -> str:
    return value.value if hasattr(value, "value") else str(value)


def _shared_processors() -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _renderer(environment: str) -> Processor:
    if environment.lower() == EnumEnvironment.PRODUCTION.value:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def _handlers(file_path: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if file_path:
        handlers.append(logging.FileHandler(file_path))
    return handlers


def configure_logging(
    level: Optional[str] = None,
    format_string: Optional[str] = None,
    file_path: Optional[str] = None,
    environment: str = "development",
) -> None:
    """
    Configure stdlib logging and structlog.

    Values not passed in fall back to LOG_LEVEL and LOG_FILE_PATH, so the
    CLI and the app factory can log before settings are loaded. Calling this
    again replaces the previous handlers.

    Args:
        level: Log level name.
        format_string: Accepted for settings compatibility; rendering is
            done by structlog.
        file_path: Optional log file; console output is always kept.
        environment: Application environment (development, production, etc.)
    """
    log_level = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    log_file = file_path or os.environ.get("LOG_FILE_PATH")
    numeric_level = getattr(logging, log_level, logging.INFO)

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=_renderer(environment),
        foreign_pre_chain=_shared_processors(),
    )
    handlers = _handlers(log_file)
    for handler in handlers:
        handler.setFormatter(formatter)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.handlers = handlers
    root_logger.setLevel(numeric_level)

    # httpx logs full request URLs, and the reasoning API key travels in the query
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    structlog.get_logger(__name__).debug(
        "logging.configured", level=log_level, file_path=log_file, environment=environment
    )


def update_logging_from_settings(settings: Any) -> None:
    """
    Re-apply logging configuration from the loaded application settings.

    Args:
        settings: AppSettings, or anything with ``logging`` and ``environment``
    """
    try:
        configure_logging(
            level=_enum_value(settings.logging.level),
            format_string=settings.logging.format,
            file_path=settings.logging.file_path,
            environment=_enum_value(settings.environment),
        )
    except Exception as e:
        logging.error(f"Failed to update logging from settings: {e}")


@contextmanager
def bind_workflow_context(workflow_id: str, **extra: Any) -> Iterator[None]:
    """Bind a workflow id (and extra keys) to every event logged in the block."""
    structlog.contextvars.bind_contextvars(workflow_id=workflow_id, **extra)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars("workflow_id", *extra.keys())


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger configured for the project."""
    return structlog.get_logger(name)
