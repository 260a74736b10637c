"""Request-scoped context for canonical log lines.

A dict held in a ContextVar that routes and repositories enrich while a
request runs. RequestTimingMiddleware (core.telemetry) creates it at request
start and logs it once at request end.

Usage:
    from core.wide_event import set_wide_event_fields

    set_wide_event_fields(product_id=product.id, product_action="save")
"""

from contextvars import ContextVar
from typing import Any

_wide_event: ContextVar[dict[str, Any]] = ContextVar("wide_event")


def init_wide_event() -> dict[str, Any]:
    """Start a new wide event for the current async context."""
    event: dict[str, Any] = {}
    _wide_event.set(event)
    return event


def get_wide_event() -> dict[str, Any]:
    """Get the current wide event dict. Returns empty dict if not initialized."""
    try:
        return _wide_event.get()
    except LookupError:
        return {}


def set_wide_event_fields(**kwargs: Any) -> None:
    """Set fields on the current wide event.

    No-op outside a request (CLI, background tasks): the middleware always
    seeds request fields, so an empty dict means no request is active.
    """
    event = get_wide_event()
    if event:
        event.update(kwargs)


def clear_wide_event() -> None:
    _wide_event.set({})
