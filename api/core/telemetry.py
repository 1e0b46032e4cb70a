"""Request timing and canonical request logging."""

import time
import uuid

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.config import get_settings
from core.logger import bind_contextvars, clear_contextvars, get_logger
from core.wide_event import clear_wide_event, get_wide_event, init_wide_event

logger = get_logger(__name__)

# Successful requests slower than this are always logged
SLOW_REQUEST_THRESHOLD_MS = 1000


class RequestTimingMiddleware:
    """Times each request and emits one wide event when it finishes.

    - Adds ``x-request-id`` and ``x-request-duration-ms`` response headers
    - Binds request_id into structlog contextvars for every log line
    - Always emits for errors and slow requests, skips fast successes
    """

    def __init__(self, app: ASGIApp):
        self.app = app
        settings = get_settings()
        self.service_name = settings.service_name
        self.service_version = settings.service_version

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        method = scope.get("method", "UNKNOWN")
        path = scope.get("path", "")

        client = scope.get("client")
        client_ip = client[0] if client else "unknown"
        request_id = str(uuid.uuid4())

        init_wide_event(
            service_name=self.service_name,
            service_version=self.service_version,
            request_id=request_id,
            http_method=method,
            http_path=path,
            http_client_ip=client_ip,
        )
        clear_contextvars()
        bind_contextvars(request_id=request_id)

        response_status: int | None = None

        async def send_wrapper(message: Message) -> None:
            nonlocal response_status

            if message.get("type") == "http.response.start":
                response_status = int(message.get("status", 0))
                headers: list[tuple[bytes, bytes]] = list(message.get("headers", []))
                duration_ms = (time.perf_counter() - start_time) * 1000
                headers.append(
                    (b"x-request-duration-ms", f"{duration_ms:.2f}".encode())
                )
                headers.append((b"x-request-id", request_id.encode()))
                message["headers"] = headers

            elif message.get("type") == "http.response.body" and not message.get(
                "more_body", False
            ):
                duration_ms = (time.perf_counter() - start_time) * 1000

                route = scope.get("route")
                route_path = getattr(route, "path", None) or path

                event = get_wide_event()
                event["http_route"] = route_path
                event["http_status_code"] = response_status
                event["duration_ms"] = round(duration_ms, 2)
                event["outcome"] = (
                    "success" if response_status and response_status < 400 else "error"
                )

                should_emit = (
                    response_status is None
                    or response_status >= 400
                    or duration_ms > SLOW_REQUEST_THRESHOLD_MS
                )

                if should_emit:
                    logger.info("request.completed", **event)

                clear_wide_event()

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            route = scope.get("route")
            route_path = getattr(route, "path", None) or path
            event = get_wide_event()
            event["http_route"] = route_path
            event["duration_ms"] = round(duration_ms, 2)
            event["outcome"] = "exception"
            event["exception_type"] = type(exc).__name__
            logger.info("request.completed", **event)
            clear_wide_event()
            raise
        finally:
            clear_contextvars()
