"""Content gateway logging config

## Setup

Logging is configured when this module is imported. It uses structlog for structured logging. Logs are
pretty-printed in the local env (APP_ENVIRONMENT='local') and JSON-formatted everywhere else.

```
from src.utils.logging import get_logger

logger = get_logger(__name__)
logger.info("Stored content item", content_id="123", kind="text")
```

## Log context

Use add_log_context() to attach values to every subsequent log line in the current async context, e.g. the
webhook request id. clear_log_context() resets it at request boundaries:

```
clear_log_context()
add_log_context(request_id="req-456")
logger.info("Processing webhook")  # Includes request_id
```

`LogContext` is the context-manager form, used around a block:

```
with LogContext(content_id=item.id):
    logger.info("Notifying subscribers")
```

### Standard logging integration

Python's standard `logging` module is routed through structlog, so library loggers (uvicorn, httpx, openai)
are formatted the same way and carry the same context.
"""

from __future__ import annotations

import logging
import os
from collections.abc import MutableMapping
from typing import Any

import newrelic.agent
import structlog
import structlog.contextvars

from src.utils.config import get_app_environment


def _is_local_environment() -> bool:
    return get_app_environment() == "local"


def newrelic_error_processor(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Send error-level logs to New Relic, passing every event through unchanged.

    notice_error() is a no-op when the agent has not been initialised, so this is safe in tests
    and local runs.
    """
    if method_name in ("error", "critical", "exception"):
        newrelic.agent.notice_error()

    return event_dict


def _get_log_renderer() -> structlog.types.Processor:
    """Get the appropriate renderer based on environment.

    Can be overridden with the LOG_RENDERER environment variable:
    - 'console': Force ConsoleRenderer (human-readable with colors)
    - 'json': Force JSONRenderer (structured JSON output)
    """
    log_renderer = os.getenv("LOG_RENDERER", "").lower()
    if log_renderer == "console":
        use_console = True
    elif log_renderer == "json":
        use_console = False
    else:
        use_console = _is_local_environment()

    if use_console:
        return structlog.dev.ConsoleRenderer(
            colors=True,
            pad_event=0,
            force_colors=False,
            repr_native_str=False,
            exception_formatter=structlog.dev.plain_traceback,
            sort_keys=True,
            event_key="message",
        )
    return structlog.processors.JSONRenderer()


def configure_logging() -> None:
    """Configure structlog and the stdlib root logger.

    Local development: human-readable console output with colors
    Everything else: JSON lines for log aggregation
    """
    common_processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.contextvars.merge_contextvars,
        structlog.processors.EventRenamer("message"),
        newrelic_error_processor,
        structlog.stdlib.filter_by_level,  # Must come after add_log_level
    ]

    structlog.configure(
        processors=common_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # filter_by_level expects a structlog logger, stdlib records are filtered by their own level
    foreign_processors = [p for p in common_processors if p != structlog.stdlib.filter_by_level]
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_get_log_renderer(),
            foreign_pre_chain=foreign_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(stream_handler)

    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    numeric_log_level = getattr(logging, log_level, logging.INFO)
    root_logger.setLevel(numeric_log_level)

    if numeric_log_level <= logging.DEBUG:
        for logger_name in ["uvicorn", "uvicorn.access", "uvicorn.error"]:
            uvicorn_logger = logging.getLogger(logger_name)
            if uvicorn_logger.level > numeric_log_level:
                uvicorn_logger.setLevel(numeric_log_level)


configure_logging()


def add_log_context(**kwargs: Any) -> None:
    """Add values to the logging context. Simple wrapper for structlog's contextvars."""
    structlog.contextvars.bind_contextvars(**kwargs)


def remove_log_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_log_context() -> None:
    """Clear all values from the logging context.

    Useful for ensuring a clean context at the start of a new request.
    """
    structlog.contextvars.clear_contextvars()


LogContext = structlog.contextvars.bound_contextvars


def get_logger(name: str, **kwargs: Any) -> structlog.stdlib.BoundLogger:
    """Get a logger instance. Wrapper around structlog.get_logger for convenience.

    Args:
        name: Logger name (usually __name__ from the calling module)
        **kwargs: Values bound to every line this logger emits
    """
    return structlog.get_logger(name, **kwargs)


def get_uvicorn_log_config() -> dict[str, Any]:
    """Get a Uvicorn logging configuration that matches our structlog format."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processor": _get_log_renderer(),
                "foreign_pre_chain": [
                    structlog.stdlib.add_log_level,
                    structlog.stdlib.add_logger_name,
                    structlog.processors.TimeStamper(fmt="iso"),
                    structlog.processors.EventRenamer("message"),
                ],
            },
        },
        "handlers": {
            "default": {
                "formatter": "default",
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": "INFO", "propagate": False},
            "uvicorn.access": {"handlers": ["default"], "level": "INFO", "propagate": False},
            "uvicorn.error": {"handlers": ["default"], "level": "INFO", "propagate": False},
        },
    }
