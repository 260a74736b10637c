"""Per-client request limits (slowapi), keyed by remote address.

Counters live in RATELIMIT_STORAGE_URI; the default ``memory://`` is per
process, so replicas need a shared store such as Redis.
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from core.config import get_settings
from core.logger import get_logger

logger = get_logger(__name__)

READ_LIMIT = "60/minute"
WRITE_LIMIT = "30/minute"

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=get_settings().ratelimit_storage_uri,
)


def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """429 naming the breached limit; Retry-After is the limit's window."""
    window = exc.limit.limit.get_expiry()
    logger.warning(
        "ratelimit.exceeded",
        client=get_remote_address(request),
        path=request.url.path,
        limit=exc.detail,
    )
    return JSONResponse(
        status_code=429,
        content={"detail": f"Too many requests: {exc.detail}"},
        headers={"Retry-After": str(window)},
    )
