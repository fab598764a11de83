"""Structured logging configuration using structlog.

Engine, action and integration modules log through structlog with
key/value context (execution_id and workflow_id are bound per run);
routes and services use stdlib loggers, which are rendered by the
same formatter so every line comes out in one format.
"""

import logging
import sys
from typing import Optional

import structlog
from app.config import get_settings

# Libraries whose INFO output drowns the engine's own logs
_QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "aiosqlite")


def _pick_renderer(log_format: str):
    if log_format == "text":
        return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    return structlog.processors.JSONRenderer()


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Log level name, defaults to LOG_LEVEL
        log_format: "json" or "text", defaults to LOG_FORMAT
            (development always renders text)
    """
    settings = get_settings()
    level = (level or settings.LOG_LEVEL).upper()
    log_format = log_format or ("text" if settings.is_development else settings.LOG_FORMAT)

    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if log_format != "text":
        # Console renderer prints tracebacks itself
        shared_processors.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _pick_renderer(log_format),
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level, logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.SQLALCHEMY_ECHO else logging.WARNING
    )
