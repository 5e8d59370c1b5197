"""Structured logging for the gateway using structlog over stdlib logging.

On top of the usual structlog setup, records from third-party loggers
(uvicorn, httpx, ccxt) are run through the same processor chain so they
render like the gateway's own events, and the per-request chatter of the
HTTP client libraries is raised to WARNING.
"""

import logging
import os

import structlog

# Third-party loggers that log every upstream request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "ccxt", "uvicorn.access")


def setup_logging(log_level: str = "INFO") -> None:
    """Configure structlog and route stdlib records through its formatter.

    Context is carried with structlog.contextvars so that values bound in a
    request handler (asset, variant) show up on log lines emitted by the
    provider coroutines it awaits. LOG_FORMAT selects the renderer:
    "json" for production, "console" (default) for development.
    """
    log_format = os.environ.get("LOG_FORMAT", "console").lower()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    renderer: structlog.types.Processor
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)
