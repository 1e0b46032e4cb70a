"""Health, readiness and service info endpoints."""

from fastapi import APIRouter, HTTPException, Request
from starlette import status

from core.config import get_settings
from core.database import check_db_connection, comprehensive_health_check
from core.ratelimit import limiter
from schemas import (
    DetailedHealthResponse,
    HealthResponse,
    InfoResponse,
    PoolStatusResponse,
)

router = APIRouter(tags=["health"])

SERVICE_DESCRIPTION = "Department, employee, order and product services"


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness check. Never touches the database."""
    return HealthResponse(status="healthy", service=get_settings().service_name)


@router.get("/health/detailed", response_model=DetailedHealthResponse)
@limiter.limit("30/minute")
async def health_detailed(request: Request) -> DetailedHealthResponse:
    """Detailed health check with component status.

    Returns status of:
    - database: Can execute queries
    - pool: Connection pool metrics (null for pool-less engines)

    Always returns 200 - check individual component statuses for health.
    """
    result = await comprehensive_health_check(request.app.state.engine)

    pool_status = None
    if result["pool"] is not None:
        pool_status = PoolStatusResponse(**result["pool"]._asdict())

    return DetailedHealthResponse(
        status="healthy" if result["database"] else "unhealthy",
        service=get_settings().service_name,
        database=result["database"],
        pool=pool_status,
    )


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={
        503: {
            "description": "Service unavailable - init failed or DB unreachable",
            "content": {
                "application/json": {"example": {"detail": "Database unavailable"}}
            },
        }
    },
)
@limiter.limit("30/minute")
async def ready(request: Request) -> HealthResponse:
    """Readiness endpoint.

    Returns 200 only when:
    - Startup (migrations, connectivity check) has completed successfully
    - The database is reachable
    """
    init_error = getattr(request.app.state, "init_error", None)
    if init_error:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Initialization failed: {init_error}",
        )

    if not getattr(request.app.state, "init_done", False):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Starting",
        )

    try:
        await check_db_connection(request.app.state.engine)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        ) from e

    return HealthResponse(status="ready", service=get_settings().service_name)


@router.get("/info", response_model=InfoResponse)
async def info() -> InfoResponse:
    settings = get_settings()
    return InfoResponse(
        service=settings.service_name,
        description=SERVICE_DESCRIPTION,
        version=settings.service_version,
    )
