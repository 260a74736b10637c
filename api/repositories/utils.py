"""Helpers shared by repositories."""

import time
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from core.wide_event import set_wide_event_fields

SLOW_QUERY_THRESHOLD_MS = 500

P = ParamSpec("P")
R = TypeVar("R")


def log_slow_query(
    operation_name: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Record slow or failed repository calls on the request's wide event.

    A call slower than SLOW_QUERY_THRESHOLD_MS sets ``db_slow_query``; a call
    that raises sets ``db_query_error`` with the exception type and message.
    The exception itself is re-raised untouched.

    Usage:
        @log_slow_query("product_find_by_id")
        async def find_by_id(self, product_id: int) -> Product | None:
            ...
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start = time.perf_counter()
            error: Exception | None = None
            try:
                return await func(*args, **kwargs)
            except Exception as exc:
                error = exc
                raise
            finally:
                elapsed = round((time.perf_counter() - start) * 1000, 2)
                if error is not None:
                    set_wide_event_fields(
                        db_query_error=True,
                        db_operation=operation_name,
                        db_duration_ms=elapsed,
                        db_error=str(error),
                        db_error_type=type(error).__name__,
                    )
                elif elapsed > SLOW_QUERY_THRESHOLD_MS:
                    set_wide_event_fields(
                        db_slow_query=True,
                        db_operation=operation_name,
                        db_duration_ms=elapsed,
                    )

        return wrapper

    return decorator
