"""Liveness and readiness probes."""

from typing import NoReturn

from fastapi import APIRouter, HTTPException, Request
from starlette import status

from core.database import Base, missing_tables
from core.ratelimit import READ_LIMIT, limiter
from core.telemetry import SERVICE_NAME
from schemas import HealthResponse, ReadinessResponse

router = APIRouter(tags=["health"])

_UNAVAILABLE = {503: {"description": "Not ready to serve product requests"}}


def _not_ready(detail: str) -> NoReturn:
    raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness: the process is up. Touches nothing else."""
    return HealthResponse(status="healthy", service=SERVICE_NAME)


@router.get("/ready", response_model=ReadinessResponse, responses=_UNAVAILABLE)
@limiter.limit(READ_LIMIT)
async def ready(request: Request) -> ReadinessResponse:
    """Readiness: startup finished, the database answers, the products schema exists.

    A missing schema means neither ``DB_CREATE_TABLES`` nor the
    ``create-tables`` command has been run against this database.
    """
    state = request.app.state
    if getattr(state, "init_error", None):
        _not_ready("Startup failed")
    if not getattr(state, "init_done", False):
        _not_ready("Starting")

    try:
        missing = await missing_tables(state.engine)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        ) from e

    if missing:
        _not_ready(
            f"Missing tables: {', '.join(missing)}. "
            "Run `product-catalog create-tables` or set DB_CREATE_TABLES=true"
        )

    return ReadinessResponse(
        status="ready",
        service=SERVICE_NAME,
        database=state.engine.dialect.name,
        tables=sorted(Base.metadata.tables),
    )
