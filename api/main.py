"""FastAPI application for the department, employee, order and product services."""

import asyncio
import subprocess
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import fastapi
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from core.config import get_settings
from core.database import (
    create_engine,
    create_session_maker,
    dispose_engine,
    init_db,
)
from core.logger import configure_logging, get_logger
from core.middleware import SecurityHeadersMiddleware
from core.ratelimit import limiter, rate_limit_exceeded_handler
from core.telemetry import RequestTimingMiddleware
from routes import (
    department_router,
    employee_router,
    health_router,
    order_router,
    product_router,
)
from schemas import CamelModel

configure_logging()
logger = get_logger(__name__)

# Locations that only say where a field came from, not which field it is
_LOCATION_PREFIXES = {"body", "query", "path"}

# Start of the message EmailStr raises for a malformed address
_INVALID_EMAIL_PREFIX = "value is not a valid email address"


def _request_model(request: Request) -> type[CamelModel] | None:
    """Body schema of the matched route, or None when it takes no body."""
    body_field = getattr(request.scope.get("route"), "body_field", None)
    model = getattr(getattr(body_field, "field_info", None), "annotation", None)
    if isinstance(model, type) and issubclass(model, CamelModel):
        return model
    return None


def _error_message(
    error: dict[str, Any], field: str, model: type[CamelModel] | None
) -> str:
    message = str(error.get("msg", "Invalid value")).removeprefix("Value error, ")
    if model is None:
        return message
    if error.get("type") == "missing" or ("input" in error and error["input"] is None):
        return model.required_messages.get(field, message)
    if message.startswith(_INVALID_EMAIL_PREFIX):
        return model.invalid_email_message
    return message


def _format_validation_errors(
    exc: RequestValidationError, model: type[CamelModel] | None = None
) -> dict[str, str]:
    """Flatten pydantic errors into {"field.path": "message"}.

    With the body model known, absent fields and bad email addresses get the
    model's own messages. The first message wins when a field fails more
    than one check.
    """
    errors: dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        if len(loc) > 1 and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        field = ".".join(loc) or "request"
        errors.setdefault(field, _error_message(error, field, model))
    return errors


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for unhandled exceptions."""
    logger.exception(
        "unhandled.exception",
        exc_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred. Please try again."},
    )


async def validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Handler for request validation errors: 400 with a per-field message map."""
    if not isinstance(exc, RequestValidationError):
        return JSONResponse(status_code=500, content={"detail": "Unexpected error"})

    errors = _format_validation_errors(exc, _request_model(request))
    logger.warning(
        "request.validation_error",
        path=request.url.path,
        method=request.method,
        error_count=len(errors),
        fields=sorted(errors),
    )
    return JSONResponse(
        status_code=400,
        content={"detail": "Request validation failed", "errors": errors},
    )


async def _run_alembic_migrations() -> None:
    """Run Alembic migrations in a subprocess.

    env.py drives its own event loop, which cannot nest inside the one
    serving the app.
    """
    cmd = [
        sys.executable,
        "-c",
        (
            "from alembic import command; "
            "from alembic.config import Config; "
            "command.upgrade(Config('alembic.ini'), 'head')"
        ),
    ]
    cwd = Path(__file__).parent

    result = await asyncio.to_thread(
        lambda: subprocess.run(
            cmd, cwd=cwd, capture_output=True, text=True, timeout=120
        )
    )

    if result.returncode != 0:
        stderr = result.stderr.strip()
        logger.error("migrations.failed", stderr=stderr)
        raise RuntimeError(f"Alembic migration failed:\n{stderr}")

    logger.info("migrations.complete")


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """Create DB engine at startup, dispose on shutdown."""
    settings = get_settings()
    app.state.engine = create_engine()
    app.state.session_maker = create_session_maker(app.state.engine)

    app.state.init_done = False
    app.state.init_error = None

    try:
        async with asyncio.timeout(60):
            await init_db(app.state.engine)

        if settings.run_migrations:
            async with asyncio.timeout(120):
                await _run_alembic_migrations()

        app.state.init_done = True
        logger.info("init.complete", service=settings.service_name)
    except TimeoutError:
        logger.error(
            "init.timeout",
            init_done=app.state.init_done,
            hint="Startup hung, check DB connectivity and migration state",
        )
        raise RuntimeError("Application startup timed out")
    except Exception as e:
        app.state.init_error = str(e)
        logger.error("init.failed", error=str(e), exc_info=True)
        raise

    try:
        yield
    finally:
        await dispose_engine(app.state.engine)


_settings = get_settings()

app = fastapi.FastAPI(
    title="Business Services API",
    description="Department, employee, order and product CRUD services",
    version=_settings.service_version,
    lifespan=lifespan,
    docs_url="/docs" if _settings.enable_docs or _settings.debug else None,
    redoc_url="/redoc" if _settings.enable_docs or _settings.debug else None,
    openapi_url=("/openapi.json" if _settings.enable_docs or _settings.debug else None),
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(GZipMiddleware, minimum_size=500)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.allowed_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
    expose_headers=["X-Request-Duration-Ms", "X-Request-Id"],
    max_age=600,
)
# Outermost, so timing covers every other middleware
app.add_middleware(RequestTimingMiddleware)

app.include_router(health_router)
app.include_router(department_router)
app.include_router(employee_router)
app.include_router(order_router)
app.include_router(product_router)
