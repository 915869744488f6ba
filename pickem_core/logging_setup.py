"""Centralized logging configuration for the CLI and batch jobs."""

import logging
import logging.handlers
from pathlib import Path

import structlog

from pickem_core.config import Settings

SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.dev.set_exc_info,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
]


def _resolve_level(settings: Settings) -> int:
    level = getattr(logging, settings.logging.level.upper(), None)
    if not isinstance(level, int):
        print(f"Warning: Invalid log level '{settings.logging.level}', defaulting to INFO")
        return logging.INFO
    return level


def _formatter(json_output: bool, colors: bool) -> structlog.stdlib.ProcessorFormatter:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=colors)
    )
    return structlog.stdlib.ProcessorFormatter(
        processors=SHARED_PROCESSORS
        + [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=SHARED_PROCESSORS,
    )


def configure_logging(settings: Settings, json_output: bool = False) -> None:
    """
    Configure structlog and stdlib logging based on settings.

    Args:
        settings: Application settings containing logging configuration
        json_output: If True, render JSON lines. If False, use human-readable
                    console output (colored on the console, plain in the file)

    Note:
        Idempotent. Falls back to console-only logging when the log file
        or its directory cannot be created.
    """
    log_level = _resolve_level(settings)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(_formatter(json_output, colors=True))
    handlers: list[logging.Handler] = [console_handler]

    log_path = Path(settings.logging.file)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=10_485_760,  # 10MB
            backupCount=5,
            encoding="utf-8",
        )
    except OSError as e:
        print(f"Warning: Could not create log file {log_path}: {e}")
        print("Falling back to console-only logging")
    else:
        file_handler.setLevel(log_level)
        file_handler.setFormatter(_formatter(json_output, colors=False))
        handlers.insert(0, file_handler)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=handlers,
        force=True,
    )

    structlog.configure(
        processors=SHARED_PROCESSORS
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
