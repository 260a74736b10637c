"""Request timing, wide-event emission and optional OpenTelemetry tracing.

Every HTTP request gets an id and a wide event. When the response body has
been sent the event is completed with route, status and duration, and one
``request.completed`` line is logged if ``should_emit`` keeps it.
"""

import os
import time
import uuid
from typing import Any

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.logger import TELEMETRY_ENABLED, get_logger
from core.wide_event import clear_wide_event, get_wide_event, init_wide_event

logger = get_logger(__name__)

SERVICE_NAME = os.getenv("SERVICE_NAME", "product-catalog-api")
SERVICE_VERSION = os.getenv("SERVICE_VERSION", "1.0.0")

SLOW_REQUEST_THRESHOLD_MS = 1000

_READ_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})

if TELEMETRY_ENABLED:
    from opentelemetry import trace
    from opentelemetry.trace import Status, StatusCode

    tracer = trace.get_tracer(__name__)
else:
    trace = None
    tracer = None


def instrument_sqlalchemy_engine(engine: Any) -> None:
    """Trace SQL statements issued through ``engine`` (no-op without telemetry)."""
    if not TELEMETRY_ENABLED:
        return

    from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor

    SQLAlchemyInstrumentor().instrument(
        engine=engine.sync_engine,
        enable_commenter=True,
    )
    logger.info("sqlalchemy.instrumentation.enabled")


def should_emit(method: str, status_code: int | None, duration_ms: float) -> bool:
    """Tail sampling: keep errors, slow requests and writes; drop fast reads."""
    if status_code is None or status_code >= 400:
        return True
    if duration_ms > SLOW_REQUEST_THRESHOLD_MS:
        return True
    return method not in _READ_METHODS


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def _start_event(scope: Scope, request_id: str) -> None:
    init_wide_event().update(
        service_name=SERVICE_NAME,
        service_version=SERVICE_VERSION,
        request_id=request_id,
        http_method=scope.get("method", "UNKNOWN"),
        http_path=scope.get("path", ""),
    )


def _annotate_span(route_path: str, status_code: int) -> None:
    span = trace.get_current_span()
    span.set_attribute("http.route", route_path)
    span.set_attribute("http.status_code", status_code)
    if status_code >= 500:
        span.set_status(Status(StatusCode.ERROR, f"HTTP {status_code}"))


class RequestTimingMiddleware:
    """Times each request and emits one ``request.completed`` wide event.

    Adds ``x-request-id`` and ``x-request-duration-ms`` response headers.
    Must be the outermost middleware so the duration covers the whole stack.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        method = scope.get("method", "UNKNOWN")
        request_id = str(uuid.uuid4())
        _start_event(scope, request_id)
        status_code: int | None = None

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            message_type = message.get("type")

            if message_type == "http.response.start":
                status_code = int(message.get("status", 0))
                message["headers"] = [
                    *message.get("headers", []),
                    (b"x-request-duration-ms", f"{_elapsed_ms(start):.2f}".encode()),
                    (b"x-request-id", request_id.encode()),
                ]
            elif message_type == "http.response.body" and not message.get(
                "more_body", False
            ):
                self._finish(scope, method, status_code, _elapsed_ms(start))

            await send(message)

        try:
            if tracer is None:
                await self.app(scope, receive, send_wrapper)
            else:
                with tracer.start_as_current_span(
                    f"{method} {scope.get('path', '')}",
                    attributes={
                        "http.method": method,
                        "request.id": request_id,
                        "service.name": SERVICE_NAME,
                    },
                ):
                    await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            event = get_wide_event()
            event.update(
                duration_ms=round(_elapsed_ms(start), 2),
                outcome="exception",
                exception_type=type(exc).__name__,
            )
            logger.info("request.completed", **event)
            clear_wide_event()
            raise

    @staticmethod
    def _finish(
        scope: Scope, method: str, status_code: int | None, duration_ms: float
    ) -> None:
        route_path = getattr(scope.get("route"), "path", None) or scope.get("path", "")

        if tracer is not None and status_code is not None:
            _annotate_span(route_path, status_code)

        event = get_wide_event()
        event.update(
            http_route=route_path,
            http_status_code=status_code,
            duration_ms=round(duration_ms, 2),
            outcome="success" if status_code and status_code < 400 else "error",
        )

        if should_emit(method, status_code, duration_ms):
            logger.info("request.completed", **event)

        clear_wide_event()
