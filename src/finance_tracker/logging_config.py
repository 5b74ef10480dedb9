"""Structured logging for Finance Tracker.

structlog renders every event through the standard library so one handler
setup serves both: a readable console line for local use and the CLI, or
one JSON object per line when ``FT_LOG_FORMAT=json``. Output goes to stderr;
stdout is reserved for command output.
"""

import logging
import sys
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from finance_tracker.config import Settings, get_settings

# Loggers from the HTTP stack, capped at INFO even when we run at DEBUG
HTTP_LOGGERS = ("httpx", "httpcore")


def _app_context(settings: Settings) -> Processor:
    app = settings.app_name
    environment = settings.environment.value

    def add_app_context(
        logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.setdefault("app", app)
        event_dict.setdefault("environment", environment)
        return event_dict

    return add_app_context


def _build_processors(settings: Settings) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.log_format == "json":
        processors += [
            _app_context(settings),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    return processors


def configure_logging(settings: Settings | None = None) -> None:
    """Route structlog through stdlib logging according to ``settings``.

    Safe to call more than once; the CLI calls it on every invocation.
    """
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level.value)

    structlog.configure(
        processors=_build_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    if settings.log_file:
        _add_file_handler(settings.log_file, level)

    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))


def _add_file_handler(log_file: Path, level: int) -> None:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(message)s"))
    logging.getLogger().addHandler(handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, e.g. ``get_logger(__name__)``."""
    return structlog.stdlib.get_logger(name)


def log_context(**kwargs: Any) -> AbstractContextManager[Any]:
    """Bind ``kwargs`` to every event logged inside the ``with`` block.

    Previously bound values are restored on exit:

        with log_context(display_currency="EUR"):
            logger.info("exchange_rates_fetched")  # carries display_currency
    """
    return structlog.contextvars.bound_contextvars(**kwargs)
