"""Rate limiting configuration using slowapi.

SCALABILITY NOTES:
- memory:// storage keeps separate counters per worker process
- Multi-replica deployments should set RATELIMIT_STORAGE_URI="redis://host:port/db"
"""

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from core.config import get_settings
from core.logger import get_logger

logger = get_logger(__name__)

settings = get_settings()

# Fall back to in-process counters only when a shared store is configured
_using_redis = settings.ratelimit_storage_uri.startswith("redis://")

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["100/minute"],
    storage_uri=settings.ratelimit_storage_uri,
    in_memory_fallback_enabled=_using_redis,
    key_prefix="bsa:",
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Return 429 with a Retry-After header."""
    logger.warning(
        "ratelimit.exceeded",
        client=get_remote_address(request),
        limit=exc.detail,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Rate limit exceeded. Please slow down.",
            "retry_after": exc.detail,
        },
        headers={"Retry-After": str(getattr(exc, "retry_after", 60))},
    )


# Writes are cheaper to abuse than reads
READ_LIMIT = "120/minute"
WRITE_LIMIT = "30/minute"
