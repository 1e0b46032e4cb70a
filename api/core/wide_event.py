"""Request-scoped wide event for canonical log lines.

RequestTimingMiddleware opens one event per request and logs it as
``request.completed`` when the response finishes. Services attach the
entity the request touched:

    from core.wide_event import record_entity

    record_entity("order", order.id, action="status_updated", status="SHIPPED")
    # {"order": {"id": 7, "action": "status_updated", "status": "SHIPPED"}}

Outside a request (CLI, migrations, unit tests) every recorder is a no-op.
"""

from contextvars import ContextVar
from typing import Any

_wide_event: ContextVar[dict[str, Any] | None] = ContextVar(
    "wide_event", default=None
)


def init_wide_event(**fields: Any) -> dict[str, Any]:
    """Open a fresh event for the current request and return it."""
    event: dict[str, Any] = dict(fields)
    _wide_event.set(event)
    return event


def get_wide_event() -> dict[str, Any]:
    """The open event, or an empty throwaway dict when none is open."""
    event = _wide_event.get()
    return event if event is not None else {}


def record_fields(**fields: Any) -> None:
    event = _wide_event.get()
    if event is not None:
        event.update(fields)


def record_entity(family: str, entity_id: int | None, **fields: Any) -> None:
    """Attach an entity under its family key.

    Repeated calls for the same family merge, so a request that reads then
    updates an order ends up with one "order" entry.
    """
    event = _wide_event.get()
    if event is None:
        return
    entry = event.setdefault(family, {})
    if entity_id is not None:
        entry["id"] = entity_id
    entry.update(fields)


def clear_wide_event() -> None:
    _wide_event.set(None)
