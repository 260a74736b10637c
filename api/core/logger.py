"""Logging setup: structlog rendering for both structlog and stdlib loggers.

LOG_FORMAT=json gives one JSON object per line; LOG_FORMAT=console gives
coloured key=value output. Unset, JSON is used only when telemetry is on.
LOG_LEVEL sets the root level (default INFO).

Usage:
    from core import get_logger
    logger = get_logger(__name__)
    logger.info("product.saved", product_id=42)
"""

import logging
import os
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

TELEMETRY_ENABLED = bool(
    os.getenv("APPLICATIONINSIGHTS_CONNECTION_STRING")
    or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
)

# Chatty at INFO; the request middleware already logs what matters
_QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "aiosqlite", "asyncio")


def add_trace_ids(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Stamp the active OpenTelemetry trace and span ids onto the entry."""
    if not TELEMETRY_ENABLED:
        return event_dict

    from opentelemetry import trace

    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def _level_from_env() -> int:
    level = logging.getLevelName(os.environ.get("LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def _renderer() -> Processor:
    log_format = os.environ.get("LOG_FORMAT", "").lower()
    use_json = log_format == "json" or (log_format != "console" and TELEMETRY_ENABLED)
    if use_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=True, exception_formatter=structlog.dev.plain_traceback
    )


def configure_logging() -> None:
    """Route structlog and stdlib records through one stdout handler.

    Safe to call more than once: the root handlers are replaced each time.
    """
    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.stdlib.ExtraAdder(),
        add_trace_ids,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                _renderer(),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(_level_from_env())

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.stdlib.get_logger(name)
