"""Helpers shared by the repositories: query timing and existence checks."""

import time
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from sqlalchemy import ColumnElement, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.logger import get_logger
from core.wide_event import record_fields

logger = get_logger(__name__)

# Threshold for logging slow queries (milliseconds)
SLOW_QUERY_THRESHOLD_MS = 500

P = ParamSpec("P")
R = TypeVar("R")


def log_slow_query(
    operation_name: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Time a repository call and note slow or failing ones on the wide event.

    Calls slower than SLOW_QUERY_THRESHOLD_MS are logged at DEBUG. Errors are
    recorded and re-raised unchanged.

    Usage:
        @log_slow_query("order.get_by_id")
        async def get_by_id(self, order_id: int) -> Order | None:
            ...
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start_time = time.perf_counter()

            def elapsed_ms() -> float:
                return round((time.perf_counter() - start_time) * 1000, 2)

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                record_fields(
                    db_query_error=True,
                    db_operation=operation_name,
                    db_duration_ms=elapsed_ms(),
                    db_error_type=type(e).__name__,
                )
                raise

            duration_ms = elapsed_ms()
            if duration_ms > SLOW_QUERY_THRESHOLD_MS:
                logger.debug(
                    "db.query.slow",
                    db_operation=operation_name,
                    db_duration_ms=duration_ms,
                )
                record_fields(
                    db_slow_query=True,
                    db_operation=operation_name,
                    db_duration_ms=duration_ms,
                )
            return result

        return wrapper

    return decorator


async def row_exists(db: AsyncSession, *criteria: ColumnElement[bool]) -> bool:
    """SELECT EXISTS(...) without loading the row."""
    result = await db.execute(select(exists().where(*criteria)))
    return bool(result.scalar())
